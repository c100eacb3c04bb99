"""srp - create Sentry releases from bundler output and upload source maps."""

__version__ = "0.3.0"
