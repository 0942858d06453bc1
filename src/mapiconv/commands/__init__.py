"""Built-in CLI commands, registered on the root app in :mod:`mapiconv.app`."""
