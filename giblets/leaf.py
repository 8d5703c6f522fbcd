'''Leaf: an application window that slides in and out on demand.

The window manager has to announce new clients on ``potential-leaf-spawn``
before its own rules run. LeafSetup.install wires that up once; call it from
the window manager's startup before toggling any leaf::

    from giblets import leaf
    leaf.install(wm, rules=wm_rules)
    term = leaf.Leaf('urxvt', wm, screen)
    term.toggle()
'''

import logging, shlex, subprocess

from . import options
from .geometry import Rect

logger = logging.getLogger(__name__)

SPAWN_SIGNAL = 'potential-leaf-spawn'

TOP, BOTTOM, LEFT, RIGHT = 'top', 'bottom', 'left', 'right'

SCHEMA = options.Schema('leaf', [
    ('position', BOTTOM, options.choice(TOP, BOTTOM, LEFT, RIGHT)),
    ('height', 0.2, options.positive),
    ('width', 0.2, options.positive),
    ('sticky', False, options.boolean),
])

def spawn(app):
    argv = shlex.split(app) if isinstance(app, str) else list(app)
    return subprocess.Popen(argv, start_new_session = True).pid

def extent(total, size):
    '''Sizes up to 1 are a fraction of total, larger ones are pixels.'''
    return total * size if size <= 1 else size

def leaf_geometry(workarea, position, width, height):
    width = int(extent(workarea.width, width))
    height = int(extent(workarea.height, height))
    right = workarea.x + workarea.width - width
    if position == BOTTOM:
        return Rect(right, workarea.y + workarea.height - height, width, height)
    if position == TOP:
        return Rect(right, workarea.y, width, height)
    middle = workarea.y + (workarea.height - height) // 2
    if position == LEFT:
        return Rect(workarea.x, middle, width, height)
    return Rect(right, middle, width, height)

class LeafSetup(object):
    '''One-shot rewiring of the window manager's manage handlers.'''

    def __init__(self):
        self.installed = False
        self.manager = None
        self.rules = None

    def pre_manage(self, client):
        self.manager.emit_signal(SPAWN_SIGNAL, client)

    def install(self, manager, rules = None):
        '''Announce clients on SPAWN_SIGNAL ahead of the ``rules`` manage handler.

        Returns False, changing nothing, when already installed.
        '''
        if self.installed:
            return False
        manager.add_signal(SPAWN_SIGNAL)
        if rules is not None:
            manager.disconnect_signal('manage', rules)
        manager.connect_signal('manage', self.pre_manage)
        if rules is not None:
            manager.connect_signal('manage', rules)
        self.manager, self.rules = manager, rules
        self.installed = True
        return True

setup = LeafSetup()
install = setup.install

class Leaf(object):
    def __init__(self, app, manager, screen, spawner = spawn, setup = setup, theme = None, **opts):
        self.app = app
        self.manager = manager
        self.screen = screen
        self.spawner = spawner
        self.setup = setup
        self.options = SCHEMA.resolve(opts, theme)
        self.client = None
        self.pid = None
        self.launched = False

    def _check_for_app(self, client):
        if client.pid != self.pid:
            return
        self.manager.disconnect_signal(SPAWN_SIGNAL, self._check_for_app)
        self._spawned(client)

    def _spawned(self, client):
        self.client = client
        client.connect_signal('unmanage', self._unmanaged)
        client.floating = True
        client.ontop = True
        client.sticky = self.options.sticky
        client.skip_taskbar = True
        client.raise_()
        client.hidden = True
        # the app just showed up; toggle again to place and display it
        self.toggle()

    def _unmanaged(self, client):
        self.client = None
        self.launched = False

    def launch(self):
        if not self.setup.installed:
            raise RuntimeError('giblets.leaf.install() has not been called')
        self.manager.connect_signal(SPAWN_SIGNAL, self._check_for_app)
        try:
            self.pid = self.spawner(self.app)
        except OSError:
            self.manager.disconnect_signal(SPAWN_SIGNAL, self._check_for_app)
            raise
        logger.debug('spawned leaf %r as pid %s', self.app, self.pid)
        self.launched = True

    def toggle(self):
        if self.client is None and not self.launched:
            self.launch()
            return self
        # still waiting for the app to map its window
        if self.client is None:
            return self
        if not self.client.hidden:
            self.client.hidden = True
            return self
        self.client.geometry(leaf_geometry(
            self.screen.workarea, self.options.position,
            self.options.width, self.options.height,
        ))
        self.client.hidden = False
        return self
