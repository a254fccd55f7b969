import pytest

from standin import hook, pytest_plugin
from standin.redirect import overrides


# the plugin is registered via its entry point when installed,
# importing the fixture here also makes it available in a source checkout
standin = pytest_plugin.standin


@pytest.fixture(autouse=True)
def clean_global_state():
    yield
    overrides.reset_all()
    hook.uninstall_hooks()
