import html

from . import colors, options, ticks
from .signals import SignalEmitter

SCHEMA = options.Schema('progressbar', [
    ('tick_width', 8, options.number(minimum=0)),
    ('tick_height', 8, options.number(minimum=0)),
    ('gap', 3, options.number(minimum=0)),
    ('border_width', 1, options.number(minimum=0)),
    ('color', '#8585ac', options.color),
    ('background_color', '#484874', options.color),
    ('border_color', '#8585ac', options.color),
    ('width', 100, options.number(minimum=0)),
    ('height', 12, options.number(minimum=0)),
    ('alignment', ticks.CENTER, options.choice(*ticks.ALIGNMENTS)),
    ('max_value', 1, options.positive),
])

class Progressbar(SignalEmitter):
    '''A progressbar drawn as a strip of discrete ticks.

    Every setter emits ``widget::redraw_needed`` and ``property::<name>`` with
    the widget as the only argument. Setters given a value they cannot use keep
    the current one.
    '''

    BLOCK = '█'
    _constructed = False

    def __init__(self, theme = None, **opts):
        super().__init__()
        self.add_signal('widget::redraw_needed')
        self.options = SCHEMA.resolve(opts, theme)
        self.value = 0.0
        self.tick_count = 0
        self._recount()
        self._constructed = True

    def _recount(self):
        self.tick_count = ticks.compute_tick_count(self.options.width, self.options.tick_width, self.options.gap)

    def _update(self, prop, recount = False, **changes):
        checked = {}
        for name, value in changes.items():
            try:
                checked[name] = SCHEMA.check(name, value)
            except (TypeError, ValueError):
                continue
        if not checked:
            return self
        self.options = self.options._replace(**checked)
        if recount:
            self._recount()
        self._changed(prop)
        return self

    def _changed(self, prop):
        if not self._constructed:
            return
        self.emit_signal('widget::redraw_needed', self)
        self.emit_signal('property::' + prop, self)

    def get_value(self):
        return self.value

    def set_value(self, value):
        try:
            value = float(value)
        except (TypeError, ValueError):
            return self
        if value != value:
            return self
        self.value = ticks.clamp(value / self.options.max_value)
        self._changed('value')
        return self

    def set_max_value(self, max_value):
        return self._update('max_value', max_value=max_value)

    def set_width(self, width):
        return self._update('width', recount=True, width=width)

    def set_height(self, height):
        return self._update('height', height=height)

    def set_tick_size(self, width, height = None):
        changes = {'tick_width': width}
        if height is not None:
            changes['tick_height'] = height
        return self._update('tick_size', recount=True, **changes)

    def set_gap(self, gap):
        return self._update('gap', recount=True, gap=gap)

    def set_alignment(self, alignment):
        return self._update('alignment', alignment=alignment)

    def set_border_width(self, width):
        return self._update('border_width', border_width=width)

    def set_colors(self, color = None, background_color = None, border_color = None):
        changes = {name: value for name, value in (
            ('color', color),
            ('background_color', background_color),
            ('border_color', border_color),
        ) if value is not None}
        return self._update('colors', **changes)

    def set_vertical(self, vertical):
        raise NotImplementedError('vertical progressbars are not supported')

    def strip(self):
        o = self.options
        return ticks.TickStripConfig(
            track_width = o.width, track_height = o.height,
            tick_width = o.tick_width, tick_height = o.tick_height,
            gap = o.gap, border_width = o.border_width,
            alignment = o.alignment, value = self.value,
        )

    def layout(self):
        return ticks.layout(self.strip())

    def fit(self, width, height):
        return min((self.options.width, width)), min((self.options.height, height))

    def render(self):
        '''Yield (kind, rect, color) for every shape to draw, in paint order.'''
        o = self.options
        for tick in self.layout():
            if tick.border is not None:
                yield 'border', tick.border, o.border_color
            yield 'fill', tick.fill, o.color if tick.filled else o.background_color

    def draw(self, cr, width, height):
        '''Paint onto a cairo-compatible context.'''
        for kind, rect, color in self.render():
            cr.set_source_rgba(*colors.to_rgba(color))
            cr.rectangle(*rect)
            if kind == 'border':
                cr.set_line_width(self.options.border_width)
                cr.stroke()
            else:
                cr.fill()

    def markup(self):
        '''Pango markup showing one block character per tick, for text bars.'''
        spans = []
        run_color, run = None, 0
        for tick in self.layout():
            color = self.options.color if tick.filled else self.options.background_color
            if color != run_color and run:
                spans.append((run_color, run))
                run = 0
            run_color = color
            run += 1
        if run:
            spans.append((run_color, run))
        return ''.join(
            '<span foreground="{}">{}</span>'.format(html.escape(color), self.BLOCK * n)
            for color, n in spans
        )
