import taichi as ti

from time import perf_counter


class TimerRecord(object):
    def __init__(self, name):
        self.name = str(name)
        self.total = 0.
        self.current = 0.
        self.num = 0
        self.start = 0.

    def begin(self):
        self.start = perf_counter()

    def end(self):
        end = perf_counter()
        cur_time = end - self.start
        self.total += cur_time
        self.current = cur_time
        self.num += 1

    def profile(self):
        return self.current, self.total / self.num


class Timer(object):
    def __init__(self, sync=False):
        self.records = {}
        self.sync = sync

    def begin(self, name):
        if name not in self.records:
            self.records.update({name: TimerRecord(name)})
        self.records[name].begin()

    def end(self, name):
        # kernel launches are asynchronous on GPU backends
        if self.sync:
            ti.sync()
        self.records[name].end()

    def current(self, name):
        return self.records[name].current

    def profile0(self):
        msg = "#     Time record accmulated(execute num): "
        total_time = 0.
        for name, rec in self.records.items():
            msg += f"{name}: {rec.total * 1e3:.3f} ms({rec.num}), "
            total_time += rec.total
        msg += f"total: {total_time * 1e3:.3f} ms"
        print(msg)

    def profile1(self):
        msg = "#     Time record cur(avg): "
        for name, rec in self.records.items():
            info = rec.profile()
            msg += f"{name}: {info[0] * 1e3:.3f} ms({info[1] * 1e3:.3f} ms), "
        print(msg.rstrip(", "))
