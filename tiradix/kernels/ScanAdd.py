import taichi as ti

from tiradix.kernels.KernelBase import KernelBase, div_ceil
from tiradix.utils.constants import BIN_COUNT


@ti.data_oriented
class ScanAdd(KernelBase):
    """Turn one level of per-group counts into global offsets.

    Reduce-group ``g`` rescans its own ``block_size`` entries of the lower
    table with the same four-per-lane pattern as :class:`Scan`, then adds
    ``bases[g]``, the already scanned total of every entry before it. The
    lower table is overwritten in place.
    """
    name = "scan_add"

    def dispatch_size(self, row_length):
        return BIN_COUNT * ((row_length + self.block_size - 1) // self.block_size)

    @ti.kernel
    def run(self, groups: int, row_length: int, bases: ti.types.ndarray(), table: ti.types.ndarray(), tile: ti.types.ndarray(),
            sums: ti.types.ndarray(), carry: ti.types.ndarray()):
        num_reduce_wgs = BIN_COUNT * div_ceil(row_length, self.block_size)
        per_bin = num_reduce_wgs // BIN_COUNT

        for group_id, lane in ti.ndrange(groups, self.wg):
            if group_id < num_reduce_wgs:
                bin_offset = (group_id // per_bin) * row_length
                base_index = (group_id % per_bin) * self.block_size
                for i in ti.static(range(self.ept)):
                    local_index = i * self.wg + lane
                    value = ti.u32(0)
                    if base_index + local_index < row_length:
                        value = table[bin_offset + base_index + local_index]
                    tile[group_id, local_index % self.ept, local_index // self.ept] = value

        for group_id, lane in ti.ndrange(groups, self.wg):
            if group_id < num_reduce_wgs:
                total = ti.u32(0)
                for i in ti.static(range(self.ept)):
                    tmp = tile[group_id, i, lane]
                    tile[group_id, i, lane] = total
                    total += tmp
                sums[group_id, lane] = total
                carry[group_id, lane] = total

        for r in ti.static(range(self.rounds)):
            for group_id, lane in ti.ndrange(groups, self.wg):
                if group_id < num_reduce_wgs and lane >= (1 << r):
                    carry[group_id, lane] += sums[group_id, lane - (1 << r)]
            for group_id, lane in ti.ndrange(groups, self.wg):
                if group_id < num_reduce_wgs:
                    sums[group_id, lane] = carry[group_id, lane]

        for group_id, lane in ti.ndrange(groups, self.wg):
            if group_id < num_reduce_wgs:
                base = bases[group_id]
                if lane > 0:
                    base += sums[group_id, lane - 1]
                for i in ti.static(range(self.ept)):
                    tile[group_id, i, lane] += base

        for group_id, lane in ti.ndrange(groups, self.wg):
            if group_id < num_reduce_wgs:
                bin_offset = (group_id // per_bin) * row_length
                base_index = (group_id % per_bin) * self.block_size
                for i in ti.static(range(self.ept)):
                    local_index = i * self.wg + lane
                    if base_index + local_index < row_length:
                        table[bin_offset + base_index + local_index] = tile[group_id, local_index % self.ept, local_index // self.ept]
