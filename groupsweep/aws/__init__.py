"""AWS session and resource group access."""
