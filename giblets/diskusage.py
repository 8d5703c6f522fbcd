'''Disk usage for a set of mount points, read from ``df``.

A DiskUsage gizmo keeps one stats line and one progressbar per mount point and
shows them in a floating window; DiskUsageProvider puts the same information
on an i3bar.
'''

import collections, collections.abc, html, logging, re, subprocess

import psutil

from . import options
from .geometry import Window, place_in_workarea
from .progressbar import Progressbar
from .signals import SignalEmitter
from .status import Provider

logger = logging.getLogger(__name__)

# POSIX output keeps each filesystem on one line
DF_COMMAND = ('df', '-P', '-h', '--')

ERR = 'err'

SIZE = re.compile(r'^[0-9.,]+[A-Za-z]*$')
PERCENT = re.compile(r'^([0-9]+)%$')
STATS_TOKEN = re.compile(r'\$([1-4])')

MountStats = collections.namedtuple('MountStats', ['mount', 'label', 'size', 'used', 'avail', 'percent'])

HeaderLabels = collections.namedtuple('HeaderLabels', ['mount_point', 'avail', 'size', 'used'])

DEFAULT_HEADER_LABELS = HeaderLabels('<b>Mount point</b>', '<b>Avail</b>', '<b>Size</b>', '<b>Used</b>')

def discover_mounts():
    seen = []
    for part in psutil.disk_partitions():
        if part.mountpoint not in seen:
            seen.append(part.mountpoint)
    return seen

def normalize_mounts(mounts):
    '''Turn the accepted mount forms into a list of (mount, label) pairs.

    Accepts mount point strings, (mount, label) pairs and mappings with a
    ``mount`` and an optional ``label`` key. A missing label defaults to the
    mount point itself.
    '''
    if mounts is None:
        mounts = discover_mounts()
    if isinstance(mounts, str) or not isinstance(mounts, collections.abc.Iterable):
        raise TypeError("'mounts' argument must be a list")

    pairs = []
    for entry in mounts:
        if isinstance(entry, str):
            mount, label = entry, None
        elif isinstance(entry, collections.abc.Mapping):
            mount, label = entry.get('mount'), entry.get('label')
        elif isinstance(entry, (tuple, list)) and len(entry) == 2:
            mount, label = entry
        else:
            raise ValueError('Invalid mount entry: {!r}'.format(entry))
        if not isinstance(mount, str) or not mount:
            raise ValueError('Invalid mount entry: {!r}'.format(entry))
        pairs.append((mount, mount if label is None else label))
    return pairs

def run_df(mounts, runner = subprocess.run):
    '''Output of df for the given mounts; '' if df could not run at all.

    df exits non-zero when any one mount is bad but still reports the rest, so
    the output is used regardless of the exit status.
    '''
    if not mounts:
        return ''
    try:
        # mount names are not guaranteed to be valid in the locale encoding
        proc = runner(list(DF_COMMAND) + list(mounts), capture_output=True, text=True, errors='replace')
    except (OSError, ValueError, subprocess.SubprocessError) as e:
        logger.warning('could not run df: %s', e)
        return ''
    if proc.returncode != 0:
        logger.warning('df exited with %s: %s', proc.returncode, (proc.stderr or '').strip())
    return proc.stdout or ''

def parse_df(output):
    '''Map mount point -> (size, used, avail, percent) for every usable df line.'''
    found = {}
    for line in output.splitlines():
        fields = line.split(None, 5)
        if len(fields) != 6:
            continue
        _, size, used, avail, percent, mount = fields
        mo = PERCENT.match(percent)
        if mo is None or not all(SIZE.match(v) for v in (size, used, avail)):
            # the header line, or something we do not understand
            continue
        found[mount.strip()] = (size, used, avail, int(mo.group(1)))
    return found

def read_stats(pairs, runner = subprocess.run):
    parsed = parse_df(run_df([mount for mount, _ in pairs], runner))
    stats = []
    for mount, label in pairs:
        size, used, avail, percent = parsed.get(mount, (ERR, ERR, ERR, 0))
        stats.append(MountStats(mount, label, size, used, avail, percent))
    return stats

def format_stats(fmt, stats):
    '''Expand $1 (label), $2 (size), $3 (used) and $4 (avail) in fmt.'''
    values = {'1': stats.label, '2': stats.size, '3': stats.used, '4': stats.avail}
    return STATS_TOKEN.sub(lambda mo: values[mo.group(1)], fmt)

def header_labels(value):
    '''Pango header labels; a mapping may name only some of the columns.'''
    if isinstance(value, HeaderLabels):
        return value
    if not isinstance(value, collections.abc.Mapping):
        raise TypeError('header labels must be a mapping, not {}'.format(type(value).__name__))
    unknown = set(value) - set(HeaderLabels._fields)
    if unknown:
        raise ValueError('unknown header column(s): {}'.format(', '.join(sorted(unknown))))
    return DEFAULT_HEADER_LABELS._replace(**{k: options.text(v) for k, v in value.items()})

SCHEMA = options.Schema('diskusage', [
    ('width', 400, options.number(minimum=1)),
    ('border_width', 0, options.number(minimum=0)),
    ('border_color', '#000000', options.color),
    ('background_color', None, options.color, 'bg_normal'),
    ('foreground_color', None, options.color, 'fg_normal'),
    ('stats_format', '$1 -- $4 free of $2, $3 used', options.text),
    ('enable_header', True, options.boolean),
    ('header_labels', DEFAULT_HEADER_LABELS, header_labels),
    ('header_margins', options.Margins(0, 5, 0, 0), options.margins),
    ('margins', options.Margins(4, 4, 4, 4), options.margins),
    ('progressbar', Progressbar, options.factory),
])

# vertical space between a mount's stats line and its progressbar
ROW_SPACING = 3

# height of a progressbar that does not say
DEFAULT_BAR_HEIGHT = 12

def bar_height(bar):
    return getattr(getattr(bar, 'options', None), 'height', DEFAULT_BAR_HEIGHT)

class MountRow(object):
    def __init__(self, mount, label, progressbar):
        self.mount, self.label = mount, label
        self.progressbar = progressbar
        self.stats = MountStats(mount, label, ERR, ERR, ERR, 0)
        self.text = ''

class DiskUsage(SignalEmitter):
    '''Floating window of per-mount disk usage, refreshed whenever it is shown.

    ``screen`` is the host's screen: it needs a ``workarea`` Rect and a
    ``mouse_coords()`` method returning the pointer's (x, y). ``window`` is the
    floating window state the host draws; one is created when not given.
    '''

    _constructed = False

    def __init__(self, mounts = None, screen = None, window = None, theme = None, runner = None, **opts):
        super().__init__()
        if 'progressbar' in opts and not callable(opts['progressbar']):
            raise TypeError('Not a progressbar constructor')
        self.pairs = normalize_mounts(mounts)
        self.screen = screen
        self.theme = theme
        self.runner = subprocess.run if runner is None else runner
        self.options = SCHEMA.resolve(opts, theme)
        self.window = Window() if window is None else window
        self._window_pos = None
        self.rows = []
        self._build_rows()
        self._sync_window()

        for prop in ('progressbar', 'border_width', 'border_color', 'background_color',
                     'foreground_color', 'stats_format', 'enable_header', 'header_labels',
                     'width', 'visible'):
            self.add_signal('property::' + prop)
        self._constructed = True

    @property
    def mounts(self):
        return [mount for mount, _ in self.pairs]

    def inner_width(self):
        m = self.options.margins
        return max((0, self.options.width - m.left - m.right))

    def content_height(self):
        m = self.options.margins
        line = options.font_size(self.theme) + 3
        rows = sum(line + ROW_SPACING + bar_height(row.progressbar) for row in self.rows)
        height = m.top + m.bottom + rows
        if self.options.enable_header:
            hm = self.options.header_margins
            height += options.font_size(self.theme) + hm.top + hm.bottom
        return height

    def header(self):
        '''The column labels in display order, or None when headers are off.'''
        if not self.options.enable_header:
            return None
        return list(self.options.header_labels)

    def _build_rows(self):
        old = {row.mount: row for row in self.rows}
        self.rows = []
        for mount, label in self.pairs:
            factory = self.options.progressbar
            # only our own progressbar is known to take a theme
            takes_theme = isinstance(factory, type) and issubclass(factory, Progressbar)
            bar = factory(theme=self.theme) if takes_theme and self.theme is not None else factory()
            bar.set_width(self.inner_width())
            row = MountRow(mount, label, bar)
            if mount in old:
                row.stats, row.text = old[mount].stats, old[mount].text
                bar.set_value(row.stats.percent / 100)
            self.rows.append(row)

    def _sync_window(self):
        o = self.options
        self.window.width = o.width
        self.window.height = self.content_height()
        self.window.border_width = o.border_width
        self.window.border_color = o.border_color
        self.window.background = o.background_color
        self.window.foreground = o.foreground_color

    def _set(self, prop, value):
        try:
            value = SCHEMA.check(prop, value)
        except (TypeError, ValueError):
            value = SCHEMA.resolve({}, self.theme)._asdict()[prop]
        self.options = self.options._replace(**{prop: value})
        self._sync_window()
        self._changed(prop)
        return self

    def _changed(self, prop):
        if self._constructed:
            self.emit_signal('property::' + prop, self)

    def set_progressbar(self, progressbar = None):
        if progressbar is not None and not callable(progressbar):
            raise TypeError('Not a progressbar constructor')
        self.options = self.options._replace(progressbar = Progressbar if progressbar is None else progressbar)
        self._build_rows()
        self._sync_window()
        self._changed('progressbar')
        return self

    def set_width(self, width = None):
        self._set('width', width)
        for row in self.rows:
            row.progressbar.set_width(self.inner_width())
        return self

    def set_border_width(self, width = None):
        return self._set('border_width', width)

    def set_border_color(self, color = None):
        return self._set('border_color', color)

    def set_background_color(self, color = None):
        return self._set('background_color', color)

    def set_foreground_color(self, color = None):
        return self._set('foreground_color', color)

    def set_enable_header(self, enabled = None):
        return self._set('enable_header', enabled)

    def set_header_labels(self, labels = None):
        return self._set('header_labels', labels)

    def set_stats_format(self, fmt = None):
        self._set('stats_format', fmt)
        for row in self.rows:
            row.text = format_stats(self.options.stats_format, row.stats)
        return self

    def refresh(self):
        for row, stats in zip(self.rows, read_stats(self.pairs, self.runner)):
            row.stats = stats
            row.text = format_stats(self.options.stats_format, stats)
            row.progressbar.set_value(stats.percent / 100)
        return self

    def stats(self):
        return [row.stats for row in self.rows]

    def show(self):
        if self.window.visible:
            return self
        if self._window_pos is None:
            if self.screen is None:
                raise RuntimeError('DiskUsage has no screen to show its window on')
            x, y = self.screen.mouse_coords()
            self._window_pos = place_in_workarea(
                x, y, self.window.width, self.window.height,
                self.screen.workarea, self.options.border_width,
            )
        self.window.x, self.window.y = self._window_pos
        self.refresh()
        self.window.visible = True
        self._changed('visible')
        return self

    def hide(self):
        if self.window.visible:
            self.window.visible = False
            self._changed('visible')
        return self

    def toggle(self):
        if self.window.visible:
            return self.hide()
        return self.show()

class DiskUsageProvider(Provider):
    '''i3bar block: a label and a tick bar per mount.

    Left click switches between the short and the long form; right click
    toggles the floating window when the gizmo has a screen.
    '''

    interval = 30
    format = '{text} {bar}'
    format_short = '{label} {bar}'
    sep = '  '
    crit_percent = 90

    low_hue = 1.0/3.0
    high_hue = 0.0

    def __init__(self, usage, crit_percent = None):
        self.usage = usage
        if crit_percent is not None:
            self.crit_percent = crit_percent

    def bar_markup(self, row):
        markup = getattr(row.progressbar, 'markup', None)
        return markup() if callable(markup) else ''

    def run_common(self, short = False):
        self.usage.refresh()
        fmt = self.format_short if short else self.format
        parts = [
            fmt.format(
                label = html.escape(row.label),
                text = html.escape(row.text),
                percent = row.stats.percent,
                bar = self.bar_markup(row),
            ).strip()
            for row in self.usage.rows
        ]
        header = None if short else self.usage.header()
        if header:
            # labels are pango markup already
            parts.insert(0, ' '.join(header))
        worst = max((row.stats.percent for row in self.usage.rows), default = 0)

        block = super().run_common(short)
        block['full_text'] = self.sep.join(parts)
        block['color'] = self.get_gradient(worst)
        block['urgent'] = worst >= self.crit_percent
        return block

    def click(self, block):
        if super().click(block):
            return True
        if block['button'] == 3 and self.usage.screen is not None:
            self.usage.toggle()
            return True
        return False
