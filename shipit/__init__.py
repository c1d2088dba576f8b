"""shipit: validate a project and tag its next release."""

__version__ = "0.4.0"
