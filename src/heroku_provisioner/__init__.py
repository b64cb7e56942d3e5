"""Terraform-style infrastructure-as-code for the Heroku platform."""

__version__ = "0.1.0"
