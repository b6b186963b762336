"""formspray core: domain, configuration and services."""
