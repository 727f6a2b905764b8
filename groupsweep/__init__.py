"""groupsweep - rate-limit aware bulk deletion of AWS resource group members."""

__version__ = "0.1.0"
