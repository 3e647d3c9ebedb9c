import taichi as ti

from tiradix.kernels.KernelBase import KernelBase, div_ceil, extract_digit
from tiradix.utils.constants import BIN_COUNT


@ti.data_oriented
class Histogram(KernelBase):
    name = "histogram"

    def dispatch_size(self, num_keys):
        return (num_keys + self.block_size - 1) // self.block_size

    @ti.kernel
    def run(self, groups: int, shift: int, num_keys: int, slot: int, keys: ti.types.ndarray(), counts: ti.types.ndarray(),
            counters: ti.types.ndarray()):
        num_wgs = div_ceil(num_keys, self.block_size)

        for group_id, lane in ti.ndrange(groups, self.wg):
            if group_id < num_wgs and lane < BIN_COUNT:
                counters[group_id, lane] = ti.u32(0)

        for group_id, lane in ti.ndrange(groups, self.wg):
            if group_id < num_wgs:
                data_index = self.block_size * group_id + lane
                for _ in ti.static(range(self.ept)):
                    if data_index < num_keys:
                        digit = extract_digit(keys[slot, data_index], shift)
                        ti.atomic_add(counters[group_id, digit], ti.u32(1))
                    data_index += self.wg

        for group_id, lane in ti.ndrange(groups, self.wg):
            if group_id < num_wgs and lane < BIN_COUNT:
                counts[lane * num_wgs + group_id] = counters[group_id, lane]
