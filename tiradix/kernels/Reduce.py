import taichi as ti

from tiradix.kernels.KernelBase import KernelBase, div_ceil
from tiradix.utils.constants import BIN_COUNT


@ti.data_oriented
class Reduce(KernelBase):
    """Per-bin partial sums of a bin-major table.

    ``table`` holds ``BIN_COUNT`` rows of ``row_length`` entries. Every
    reduce-group folds up to ``block_size`` consecutive entries of one row
    into ``reduced[group]``, so ``reduced`` is again bin-major with
    ``ceil(row_length / block_size)`` entries per bin.
    """
    name = "reduce"

    def dispatch_size(self, row_length):
        return BIN_COUNT * ((row_length + self.block_size - 1) // self.block_size)

    @ti.kernel
    def run(self, groups: int, row_length: int, table: ti.types.ndarray(), reduced: ti.types.ndarray(), sums: ti.types.ndarray()):
        num_reduce_wgs = BIN_COUNT * div_ceil(row_length, self.block_size)
        per_bin = num_reduce_wgs // BIN_COUNT

        for group_id, lane in ti.ndrange(groups, self.wg):
            if group_id < num_reduce_wgs:
                bin_offset = (group_id // per_bin) * row_length
                base_index = (group_id % per_bin) * self.block_size
                total = ti.u32(0)
                for i in ti.static(range(self.ept)):
                    data_index = base_index + i * self.wg + lane
                    if data_index < row_length:
                        total += table[bin_offset + data_index]
                sums[group_id, lane] = total

        for r in ti.static(range(self.rounds)):
            for group_id, lane in ti.ndrange(groups, self.wg):
                if group_id < num_reduce_wgs and lane < ((self.wg // 2) >> r):
                    sums[group_id, lane] += sums[group_id, lane + ((self.wg // 2) >> r)]

        for group_id in range(groups):
            if group_id < num_reduce_wgs:
                reduced[group_id] = sums[group_id, 0]
