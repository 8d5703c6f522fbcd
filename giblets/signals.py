class SignalEmitter(object):
    '''Named signals with ordered handlers, the way window managers expose them.

    Signals may be declared up front with add_signal; connecting to an undeclared
    signal declares it. Handlers receive exactly the arguments given to
    emit_signal.
    '''

    def __init__(self):
        self._signals = {}

    def add_signal(self, name):
        self._signals.setdefault(name, [])

    def connect_signal(self, name, func):
        self._signals.setdefault(name, []).append(func)

    def disconnect_signal(self, name, func):
        handlers = self._signals.get(name, [])
        if func in handlers:
            handlers.remove(func)
            return True
        return False

    def handlers(self, name):
        return list(self._signals.get(name, ()))

    def emit_signal(self, name, *args):
        # copy, a handler may disconnect itself while we iterate
        for func in list(self._signals.get(name, ())):
            func(*args)
