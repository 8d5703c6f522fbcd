import colorsys, re

HEX_COLOR = re.compile(r'^#?([0-9a-fA-F]{6})([0-9a-fA-F]{2})?$')

def normalize(value):
    '''Canonical '#rrggbb' / '#rrggbbaa' form; raises ValueError otherwise.'''
    if not isinstance(value, str):
        raise TypeError('color must be a string, not {}'.format(type(value).__name__))
    mo = HEX_COLOR.match(value)
    if mo is None:
        raise ValueError('not a hex color: {!r}'.format(value))
    return '#' + mo.group(1).lower() + (mo.group(2) or '').lower()

def to_rgba(value):
    '''Color string to a cairo-style (r, g, b, a) tuple of floats.'''
    mo = HEX_COLOR.match(normalize(value))
    rgb, alpha = mo.group(1), mo.group(2) or 'ff'
    r, g, b = (int(rgb[i:i+2], 16) / 255.0 for i in (0, 2, 4))
    return r, g, b, int(alpha, 16) / 255.0

def get_gradient(v, l = 0.0, h = 100.0,
                 lh = 0.0, hh = 2.0/3.0,
                 ls = 1.0, hs = 1.0,
                 lv = 1.0, hv = 1.0):
    clamped = min((h, max((l, v))))
    ratio = (clamped - l) / (h - l)
    lerp = lambda l, h, ratio=ratio: ratio * h + (1 - ratio) * l
    r, g, b = colorsys.hsv_to_rgb(lerp(lh, hh), lerp(ls, hs), lerp(lv, hv))
    r, g, b = tuple(min((int(i*256), 255)) for i in (r, g, b))
    return '#{:02x}{:02x}{:02x}'.format(r, g, b)
