"""
Shared test fixtures and helpers for Vigil test suite.
"""

import pytest

from vigil.channels import DEPRECATION, EMERGENCY, ChannelRegistry
from vigil.handler import ErrorHandler
from vigil.levels import ErrorLevel
from vigil.loaders import PrefixLoader
from vigil.runtime import InMemoryRuntime
from vigil.testing import RecordingChannel, RecordingHandler


# ============================================================================
# Runtime & Channels
# ============================================================================


@pytest.fixture
def runtime():
    """In-memory runtime reporting every level."""
    return InMemoryRuntime(reporting_level=ErrorLevel.ALL)


@pytest.fixture
def channels():
    """Isolated channel registry (never the process-wide one)."""
    return ChannelRegistry()


@pytest.fixture
def deprecations(channels):
    """Recording channel registered as the deprecation channel."""
    channel = RecordingChannel()
    channels.set_channel(DEPRECATION, channel)
    return channel


@pytest.fixture
def emergencies(channels):
    """Recording channel registered as the emergency channel."""
    channel = RecordingChannel()
    channels.set_channel(EMERGENCY, channel)
    return channel


@pytest.fixture
def final_handler(runtime):
    """Recording final handler installed on the runtime."""
    handler = RecordingHandler()
    runtime.set_exception_handler(handler)
    return handler


@pytest.fixture
def handler(runtime, channels):
    """Error handler registered with the in-memory runtime."""
    return ErrorHandler.register(runtime=runtime, channels=channels)


# ============================================================================
# Source Trees
# ============================================================================


def write_source(root, relative: str, source: str):
    """Write ``source`` to ``root/relative``, creating directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source)
    return path


@pytest.fixture
def src_tree(tmp_path, runtime):
    """
    A source tree registered under the ``App\\`` prefix.

    Layout:
        src/Models/User.php     class App_Models_User (legacy naming)
        src/Http/Request.php    namespace App\\Http; class Request
    """
    src = tmp_path / "src"
    write_source(src, "Models/User.php", "<?php\nclass App_Models_User {}\n")
    write_source(
        src,
        "Http/Request.php",
        "<?php\nnamespace App\\Http;\n\nclass Request\n{\n    function get() {}\n}\n",
    )
    runtime.register_loader(PrefixLoader({"App\\": [str(src)]}))
    return src
