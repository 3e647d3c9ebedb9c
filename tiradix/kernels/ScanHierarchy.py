from tiradix.utils.constants import BIN_COUNT, HIERARCHY_LEVELS
from tiradix.utils.Exceptions import CapacityExceeded
from tiradix.utils.linalg import div_ceil

INDEX_LIMIT = (1 << 31) - 1


class ScanHierarchy(object):
    """Row lengths of the bin-major tables between Histogram and Scan.

    Level 0 is the histogram itself (``num_groups`` entries per bin). Each
    reduce level divides the row length by ``fan_out`` (rounded up). The
    single-group scan on top can only take ``fan_out`` entries in total, so
    ``BIN_COUNT * row_lengths[-1] <= fan_out`` bounds the element count.
    """
    def __init__(self, fan_out, levels=HIERARCHY_LEVELS):
        if levels < 1:
            raise ValueError("Keyword:: /levels/ should be at least 1")
        self.fan_out = fan_out
        self.levels = levels

    def max_groups(self):
        return (self.fan_out // BIN_COUNT) * self.fan_out ** self.levels

    def max_elements(self):
        return min(self.max_groups() * self.fan_out, INDEX_LIMIT)

    def check_capacity(self, num_keys):
        if num_keys > self.max_elements():
            raise CapacityExceeded(f"{num_keys} elements exceed the capacity of a {self.levels}-level scan hierarchy with fan-out "
                                   f"{self.fan_out} ({self.max_elements()} elements)")

    def row_lengths(self, num_keys):
        self.check_capacity(num_keys)
        lengths = [div_ceil(num_keys, self.fan_out)]
        for _ in range(self.levels):
            lengths.append(div_ceil(lengths[-1], self.fan_out))
        return lengths

    def table_sizes(self, num_keys):
        return [BIN_COUNT * max(length, 1) for length in self.row_lengths(num_keys)]
