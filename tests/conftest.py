"""Fakes standing in for the host window manager, screen, drawing context and df."""

import subprocess

import pytest

from giblets import options
from giblets.geometry import Rect
from giblets.signals import SignalEmitter


class RecordingContext:
    """Cairo-like context that records every call."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if name not in ("set_source_rgba", "set_line_width", "rectangle", "fill", "stroke"):
            raise AttributeError(name)

        def record(*args):
            self.calls.append((name, args))

        return record

    def names(self):
        return [name for name, _ in self.calls]


class FakeScreen:
    """Screen with a fixed work area and pointer position."""

    def __init__(self, workarea=Rect(0, 12, 1440, 876), pointer=(100, 20)):
        self.workarea = workarea
        self.pointer = pointer

    def mouse_coords(self):
        return self.pointer


class FakeClient(SignalEmitter):
    """Client window as the leaf utility sees it."""

    def __init__(self, pid):
        super().__init__()
        self.pid = pid
        self.hidden = False
        self.floating = False
        self.ontop = False
        self.sticky = None
        self.skip_taskbar = False
        self.raised = 0
        self.geometries = []

    def raise_(self):
        self.raised += 1

    def geometry(self, rect):
        self.geometries.append(rect)


class FakeManager(SignalEmitter):
    """Window manager exposing class-level client signals."""

    def manage(self, client):
        self.emit_signal("manage", client)


class FakeDF:
    """Replacement for subprocess.run returning canned df output."""

    def __init__(self, stdout="", returncode=0, error=None):
        self.stdout = stdout
        self.returncode = returncode
        self.error = error
        self.calls = []

    def __call__(self, argv, **kwargs):
        self.calls.append(argv)
        if self.error is not None:
            raise self.error
        stdout = self.stdout
        if isinstance(stdout, bytes):
            # decode the way subprocess does in text mode
            stdout = stdout.decode("utf-8", kwargs.get("errors", "strict"))
        return subprocess.CompletedProcess(argv, self.returncode, stdout, "")


DF_OUTPUT = """\
Filesystem      Size  Used Avail Capacity Mounted on
/dev/nvme0n1p2  457G  201G  233G      47% /
/dev/nvme0n1p3  916G  870G   46G      95% /home
tmpfs           7.8G     0  7.8G       0% /mnt/my disk
"""


@pytest.fixture(autouse=True)
def clean_theme():
    """Run every test against an empty global theme."""
    options.set_theme({})
    yield
    options.set_theme({})


@pytest.fixture
def screen():
    return FakeScreen()


@pytest.fixture
def df():
    return FakeDF(DF_OUTPUT)


@pytest.fixture
def make_df():
    return FakeDF


@pytest.fixture
def context():
    return RecordingContext()


@pytest.fixture
def manager():
    return FakeManager()


@pytest.fixture
def make_client():
    return FakeClient
