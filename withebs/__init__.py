"""
withebs: attach, format and mount an EBS volume for the lifetime of one command.
"""

__version__ = "1.0.0"
