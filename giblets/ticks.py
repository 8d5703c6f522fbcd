import math, collections

from .geometry import Rect

TOP = 'top'
BOTTOM = 'bottom'
CENTER = 'center'
ALIGNMENTS = (TOP, BOTTOM, CENTER)

TickStripConfig = collections.namedtuple('TickStripConfig', [
    'track_width', 'track_height',
    'tick_width', 'tick_height',
    'gap', 'border_width',
    'alignment', 'value',
])

Tick = collections.namedtuple('Tick', ['index', 'filled', 'border', 'fill'])

def clamp(v, l = 0.0, h = 1.0):
    return min((h, max((l, v))))

def compute_tick_count(track_width, tick_width, gap):
    '''Number of ticks that fit into track_width.

    This is a greedy walk rather than a division: a tick only counts while the
    remaining space is strictly larger than one tick plus its gap.
    '''
    track_width, tick_width, gap = (max((0, v)) for v in (track_width, tick_width, gap))
    step = tick_width + gap
    if step <= 0 or not math.isfinite(track_width + step):
        return 0
    count, cursor = 0, 0
    while cursor <= track_width and track_width - cursor > step:
        cursor += step
        count += 1
    return count

def filled_count(tick_count, value):
    '''How many leading ticks render as filled; rounds up.'''
    if tick_count <= 0:
        return 0
    value = clamp(value)
    # float noise in the product must not turn into an extra tick
    filled = math.ceil(round(tick_count * value, 12))
    if value > 0:
        filled = max((filled, 1))
    return int(clamp(filled, 0, tick_count))

def normalize(config):
    '''Clamp a TickStripConfig into its valid domain.'''
    return config._replace(
        track_width = max((0, config.track_width)),
        track_height = max((0, config.track_height)),
        tick_width = max((0, config.tick_width)),
        tick_height = max((0, config.tick_height)),
        gap = max((0, config.gap)),
        border_width = max((0, config.border_width)),
        alignment = config.alignment if config.alignment in ALIGNMENTS else CENTER,
        value = clamp(config.value),
    )

def tick_offset_y(config):
    if config.alignment == TOP:
        return 0
    if config.alignment == BOTTOM:
        return config.track_height - config.tick_height
    return config.track_height / 2 - config.tick_height / 2

class TickLayout(object):
    '''The ticks of one config, laid out left to right.

    Iterating walks the strip from scratch every time, so the same object can be
    drawn any number of times.
    '''

    def __init__(self, config):
        self.config = normalize(config)
        self.count = compute_tick_count(self.config.track_width, self.config.tick_width, self.config.gap)
        self.filled = filled_count(self.count, self.config.value)

    def __len__(self):
        return self.count

    def __iter__(self):
        cfg = self.config
        bw = cfg.border_width
        y = tick_offset_y(cfg)
        x = 0
        for i in range(1, self.count + 1):
            if bw > 0:
                border = Rect(
                    x + bw / 2, y + bw / 2,
                    max((0, cfg.tick_width - bw)), max((0, cfg.tick_height - bw)),
                )
                fill = Rect(
                    x + bw, y + bw,
                    max((0, cfg.tick_width - 2 * bw)), max((0, cfg.tick_height - 2 * bw)),
                )
            else:
                border = None
                fill = Rect(x, y, cfg.tick_width, cfg.tick_height)
            yield Tick(i, i <= self.filled, border, fill)
            x += cfg.tick_width + cfg.gap + bw

def layout(config):
    return TickLayout(config)
