'''Option resolution: explicit option, then theme, then built-in default.

Every layer is checked for presence, not truthiness, so 0 and False given by the
user are kept. A value that fails its check is skipped and the next layer is
consulted.
'''

import collections, collections.abc, logging, math, numbers, re

from . import colors

logger = logging.getLogger(__name__)

_theme = {}

def set_theme(theme):
    global _theme
    _theme = dict(theme or {})

def get_theme():
    return _theme

def theme_section(section, theme = None):
    theme = get_theme() if theme is None else theme
    return (theme.get('giblets') or {}).get(section) or {}

FONT_SIZE = re.compile(r'^.+ ([0-9]+)$')

def font_size(theme = None, default = 14):
    theme = get_theme() if theme is None else theme
    mo = FONT_SIZE.match(theme.get('font') or '')
    return int(mo.group(1)) if mo else default

Option = collections.namedtuple('Option', ['name', 'default', 'check', 'fallback'])
Option.__new__.__defaults__ = (None,)

Margins = collections.namedtuple('Margins', ['top', 'bottom', 'left', 'right'])

# checks: return the normalized value or raise TypeError/ValueError

def number(minimum = None, maximum = None, integer = False):
    def check(value):
        if isinstance(value, bool):
            raise TypeError('booleans are not numbers')
        if isinstance(value, str):
            value = float(value)
        if not isinstance(value, numbers.Real):
            raise TypeError('not a number: {!r}'.format(value))
        if not math.isfinite(value):
            raise ValueError('{} is not finite'.format(value))
        if minimum is not None and value < minimum:
            raise ValueError('{} is below {}'.format(value, minimum))
        if maximum is not None and value > maximum:
            raise ValueError('{} is above {}'.format(value, maximum))
        if integer:
            if value != int(value):
                raise ValueError('{} is not integral'.format(value))
            return int(value)
        return value
    return check

def positive(value):
    value = number()(value)
    if value <= 0:
        raise ValueError('{} is not positive'.format(value))
    return value

def color(value):
    return colors.normalize(value)

def choice(*values):
    def check(value):
        if value not in values:
            raise ValueError('{!r} is not one of {}'.format(value, ', '.join(map(repr, values))))
        return value
    return check

def boolean(value):
    if not isinstance(value, bool):
        raise TypeError('not a boolean: {!r}'.format(value))
    return value

def text(value):
    if not isinstance(value, str):
        raise TypeError('not a string: {!r}'.format(value))
    return value

def factory(value):
    if not callable(value):
        raise TypeError('not callable: {!r}'.format(value))
    return value

def margins(value):
    '''A single number for every side, or a mapping of some sides (others are 0).'''
    if isinstance(value, Margins):
        return value
    if isinstance(value, collections.abc.Mapping):
        unknown = set(value) - set(Margins._fields)
        if unknown:
            raise ValueError('unknown margin(s): {}'.format(', '.join(sorted(unknown))))
        check = number(minimum=0)
        return Margins(*(check(value.get(side, 0)) for side in Margins._fields))
    side = number(minimum=0)(value)
    return Margins(side, side, side, side)

class Schema(object):
    def __init__(self, name, options):
        self.name = name
        self.options = [Option(*opt) for opt in options]
        self.by_name = {opt.name: opt for opt in self.options}
        self.type = collections.namedtuple(name.title().replace('_', '') + 'Options', list(self.by_name))

    def check(self, name, value):
        return self.by_name[name].check(value)

    def resolve(self, opts = None, theme = None):
        opts = opts or {}
        theme = get_theme() if theme is None else theme
        section = theme_section(self.name, theme)
        unknown = set(opts) - set(self.by_name)
        if unknown:
            logger.debug('%s: ignoring unknown option(s) %s', self.name, ', '.join(sorted(unknown)))

        values = []
        for opt in self.options:
            layers = [('option', opts), ('theme', section)]
            if opt.fallback is not None:
                layers.append(('theme', {opt.name: theme[opt.fallback]} if opt.fallback in theme else {}))
            for origin, source in layers:
                if opt.name not in source:
                    continue
                try:
                    values.append(opt.check(source[opt.name]))
                    break
                except (TypeError, ValueError) as e:
                    logger.debug('%s: %s %s rejected (%s)', self.name, origin, opt.name, e)
            else:
                values.append(opt.default)
        return self.type(*values)
