import json, sys, time, asyncio, concurrent.futures, traceback

from . import colors

def get_loop(loop = None):
    if loop is None:
        return asyncio.get_running_loop()
    return loop

class SleepBiasWaiter(object):
    '''Sleeps until the next multiple of interval, nudging itself back on phase.'''

    def __init__(self, interval, bias = 0.0, corr = 0.1, icorr = 0.5, minint = 0.25, clock = time.CLOCK_REALTIME):
        self.interval, self.bias, self.clock = interval, bias, clock
        self.corr, self.icorr, self.minint = corr, icorr, minint
        self.bias_corr = 0.0
        self.interval_corr = 1.0
        self.reset = True
        self.start = None

    def next_sleep(self, now):
        if not self.reset:
            dt = (now - self.bias) % self.interval / self.interval
            if dt >= 0.5:
                dt -= 1.0
            delta_bias = self.corr * dt
            self.bias_corr += delta_bias
            self.bias_corr %= self.interval
            self.interval_corr *= 1.0 - (self.icorr * delta_bias)
        else:
            self.bias_corr = 0.0
            self.interval_corr = 1.0
        self.reset = False
        ci = self.interval_corr * self.interval
        dur = ci * (1.0 - (now / self.interval - int(now / self.interval)))
        if dur < self.minint * ci:
            # Usually because we missed a goal slightly early due to jitter
            dur += ci
        return dur

    async def wait(self):
        if self.start is not None:
            await asyncio.sleep(self.next_sleep(self.start))
        self.start = time.clock_gettime(self.clock)  # this is the point we want to sync to bias

class Status(object):
    '''Drives an i3bar: one JSON array of blocks per tick on fo, clicks from fi.'''

    def __init__(self, *providers, waiter = None, log = None):
        self.providers = list(providers)
        self.idmap = {id(provider): provider for provider in providers}
        self.reschedule()
        self.waiter = SleepBiasWaiter(1.0) if waiter is None else waiter
        self.log = sys.stderr if log is None else log
        self.stop = True
        # We only spawn two coroutines; the third is for any necessary internal
        # tasks
        self.executor = concurrent.futures.ThreadPoolExecutor(3)

    def reschedule(self):
        self.prov_order = sorted(enumerate(self.providers), key = lambda pr: pr[1].priority, reverse = True)

    def blocks(self):
        op = [None] * len(self.providers)
        for i, p in self.prov_order:
            op[i] = p.process()
        return op

    def click(self, line):
        '''Dispatch one line of the i3bar click stream; False once the stream ends.'''
        line = line.strip().lstrip(',')
        if line == '[' or not line:  # Beginning of the stream
            return True
        if line == ']':  # ... end of the stream?!
            return False
        try:
            block = json.loads(line)
            inst = self.idmap[int(block['instance'])]
            inst.click(block)
        except Exception:
            self.log.write(traceback.format_exc())
            self.log.flush()
        return True

    async def awrite(self, f, data, loop = None):
        return await get_loop(loop).run_in_executor(self.executor, f.write, data)

    async def aflush(self, f, loop = None):
        return await get_loop(loop).run_in_executor(self.executor, f.flush)

    async def areadline(self, f, loop = None):
        return await get_loop(loop).run_in_executor(self.executor, f.readline)

    async def co_output(self, fo):
        await self.awrite(fo, json.dumps({'version': 1, 'click_events': True}))
        await self.awrite(fo, '\n[\n')
        while not self.stop:
            await self.awrite(fo, json.dumps(self.blocks()))
            await self.awrite(fo, ',')
            await self.aflush(fo)
            await self.waiter.wait()
        await self.awrite(fo, '\n]\n')

    async def co_input(self, fi):
        while not self.stop:
            line = await self.areadline(fi)
            if not line:  # EOF
                break
            if not self.click(line):
                break

    async def co_run(self, fi = None, fo = None):
        return await asyncio.gather(
                self.co_input(sys.stdin if fi is None else fi),
                self.co_output(sys.stdout if fo is None else fo),
        )

    def run(self):
        self.stop = False
        return asyncio.run(self.co_run())

class Provider(object):
    color = '#ffffff'
    cached = {}
    priority = 0

    def run_common(self, short = False):
        return {'color': self.color, 'name': type(self).__name__, 'instance': str(id(self)), 'markup': 'pango'}

    def run(self):
        return self.run_common(False)

    def run_short(self):
        return self.run_common(True)

    interval = None
    last_run = None
    def should_run(self):
        if self.interval is None:
            return True
        if self.last_run is not None and self.last_run + self.interval > time.time():
            return False
        self.last_run = time.time()
        return True

    short = True
    def process(self):
        if self.should_run():
            try:
                self.cached = self.run_short() if self.short else self.run()
            except Exception as e:
                self.cached = self.err_block(e)
        return self.cached

    def err_block(self, exc):
        return {'color': '#ff00ff', 'full_text': str(exc), 'name': type(self).__name__, 'instance': str(id(self))}

    def click(self, block):
        if block['button'] == 1:
            self.short = not self.short
            # redraw right away rather than at the next interval
            self.last_run = None
            return True
        return False

    low_hue = 0.0
    high_hue = 2.0/3.0
    low_value = 0.0
    high_value = 100.0

    def get_gradient(self, v, l=None, h=None, lh=None, hh=None):
        return colors.get_gradient(
            v,
            self.low_value if l is None else l,
            self.high_value if h is None else h,
            self.low_hue if lh is None else lh,
            self.high_hue if hh is None else hh,
        )
