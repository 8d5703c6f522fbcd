import sys

from .diskusage import DiskUsage, DiskUsageProvider
from .status import SleepBiasWaiter, Status

def main(argv = None):
    argv = sys.argv[1:] if argv is None else argv
    # no arguments: every mounted partition
    usage = DiskUsage(argv or None)
    du = DiskUsageProvider(usage)
    du.short = False
    # A little bias to keep the bar ticking at a consistent rate
    st = Status(du, waiter = SleepBiasWaiter(1.0))
    st.run()

if __name__ == '__main__':
    main()
