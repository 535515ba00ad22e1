"""
This file configures a local pytest plugin, which allows us to configure plugin hooks to control the
execution of our tests.

Local plugins: https://docs.pytest.org/en/stable/how-to/writing_plugins.html#local-conftest-plugins
Hook reference: https://docs.pytest.org/en/stable/reference/reference.html#hooks
"""
import os


ENV_PREFIX = "INSTRUMENTED_DB_"


# Hook for dynamic configuration of pytest
# https://docs.pytest.org/en/stable/reference/reference.html#pytest.hookspec.pytest_configure
def pytest_configure(config):
    # the global configuration is read once, on first import of the package,
    # so the defaults the tests expect must be in place before that
    for name in [name for name in os.environ if name.startswith(ENV_PREFIX)]:
        del os.environ[name]
