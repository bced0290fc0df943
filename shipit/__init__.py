"""shipit - release deployment for version-tagged projects."""

__version__ = "0.1.0"
