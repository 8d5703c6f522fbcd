import collections

Rect = collections.namedtuple('Rect', ['x', 'y', 'width', 'height'])

class Window(object):
    '''State of a floating window the host draws on our behalf.'''

    def __init__(self, x = 0, y = 0, width = 0, height = 0, border_width = 0,
                 border_color = '#000000', background = None, foreground = None,
                 ontop = True):
        self.x, self.y = x, y
        self.width, self.height = width, height
        self.border_width = border_width
        self.border_color = border_color
        self.background, self.foreground = background, foreground
        self.ontop = ontop
        self.visible = False

    @property
    def rect(self):
        return Rect(self.x, self.y, self.width, self.height)

def place_in_workarea(x, y, width, height, workarea, border = 0):
    '''Move (x, y) so a window of the given size stays inside workarea.'''
    width_total = width + border * 2
    height_total = height + border * 2
    if x < workarea.x:
        x = workarea.x
    if x + width_total > workarea.x + workarea.width:
        x = workarea.x + workarea.width - width_total
    if y < workarea.y:
        y = workarea.y
    if y + height_total > workarea.y + workarea.height:
        y = workarea.y + workarea.height - height_total
    return x, y
