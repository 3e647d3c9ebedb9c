import taichi as ti

from tiradix.kernels.KernelBase import KernelBase, div_ceil, extract_digit
from tiradix.utils.constants import BIN_COUNT, BITS_PER_PASS


@ti.data_oriented
class Scatter(KernelBase):
    """Locally sort every group by the current digit and write it out.

    Each of the four iterations takes one element per lane. Two 2-bit split
    rounds sort the 256 elements of the iteration by digit: every lane puts a
    one into byte ``sub_digit`` of a u32, a single group scan of these words
    yields the four sub-bin counters at once, and keys and values are moved
    to their local rank through the exchange row. The destination index is
    then the running global base of the digit's bin plus the element's rank
    among the iteration's elements with that digit.
    """
    name = "scatter"

    def dispatch_size(self, num_keys):
        return (num_keys + self.block_size - 1) // self.block_size

    @ti.kernel
    def run(self, groups: int, shift: int, num_keys: int, src: int, dst: int, keys: ti.types.ndarray(), values: ti.types.ndarray(),
            offsets: ti.types.ndarray(), exchange: ti.types.ndarray(), scratch: ti.types.ndarray(), carry: ti.types.ndarray(),
            counters: ti.types.ndarray(), bin_base: ti.types.ndarray(), key_reg: ti.types.ndarray(), value_reg: ti.types.ndarray(),
            rank_reg: ti.types.ndarray()):
        num_wgs = div_ceil(num_keys, self.block_size)

        for group_id, lane in ti.ndrange(groups, self.wg):
            if group_id < num_wgs and lane < BIN_COUNT:
                bin_base[group_id, lane] = offsets[lane * num_wgs + group_id]

        for it in ti.static(range(self.ept)):
            for group_id, lane in ti.ndrange(groups, self.wg):
                if group_id < num_wgs:
                    if lane < BIN_COUNT:
                        counters[group_id, lane] = ti.u32(0)
                    data_index = self.block_size * group_id + it * self.wg + lane
                    # lanes past the end carry the largest key so they rank last
                    key = ~ti.u32(0)
                    value = ti.u32(0)
                    if data_index < num_keys:
                        key = keys[src, data_index]
                        value = values[src, data_index]
                    key_reg[group_id, lane] = key
                    value_reg[group_id, lane] = value

            for bit_shift in ti.static(range(0, BITS_PER_PASS, 2)):
                for group_id, lane in ti.ndrange(groups, self.wg):
                    if group_id < num_wgs:
                        bit_key = (extract_digit(key_reg[group_id, lane], shift) >> bit_shift) & 3
                        packed = ti.u32(1) << ti.u32(bit_key * 8)
                        scratch[group_id, lane] = packed
                        carry[group_id, lane] = packed

                for r in ti.static(range(self.rounds)):
                    for group_id, lane in ti.ndrange(groups, self.wg):
                        if group_id < num_wgs and lane >= (1 << r):
                            carry[group_id, lane] += scratch[group_id, lane - (1 << r)]
                    for group_id, lane in ti.ndrange(groups, self.wg):
                        if group_id < num_wgs:
                            scratch[group_id, lane] = carry[group_id, lane]

                for group_id, lane in ti.ndrange(groups, self.wg):
                    if group_id < num_wgs:
                        key = key_reg[group_id, lane]
                        bit_key = (extract_digit(key, shift) >> bit_shift) & 3
                        total = scratch[group_id, self.wg - 1]
                        local_sum = (total << 8) + (total << 16) + (total << 24)
                        if lane > 0:
                            local_sum += scratch[group_id, lane - 1]
                        rank = ti.cast((local_sum >> ti.u32(bit_key * 8)) & ti.u32(0xFF), ti.i32)
                        rank_reg[group_id, lane] = rank
                        exchange[group_id, rank] = key

                for group_id, lane in ti.ndrange(groups, self.wg):
                    if group_id < num_wgs:
                        key_reg[group_id, lane] = exchange[group_id, lane]

                for group_id, lane in ti.ndrange(groups, self.wg):
                    if group_id < num_wgs:
                        exchange[group_id, rank_reg[group_id, lane]] = value_reg[group_id, lane]

                for group_id, lane in ti.ndrange(groups, self.wg):
                    if group_id < num_wgs:
                        value_reg[group_id, lane] = exchange[group_id, lane]

            for group_id, lane in ti.ndrange(groups, self.wg):
                if group_id < num_wgs:
                    digit = extract_digit(key_reg[group_id, lane], shift)
                    ti.atomic_add(counters[group_id, digit], ti.u32(1))

            for group_id, lane in ti.ndrange(groups, self.wg):
                if group_id < num_wgs and lane < BIN_COUNT:
                    count = counters[group_id, lane]
                    scratch[group_id, lane] = count
                    carry[group_id, lane] = count

            for r in ti.static(range(self.bin_rounds)):
                for group_id, lane in ti.ndrange(groups, self.wg):
                    if group_id < num_wgs and lane < BIN_COUNT and lane >= (1 << r):
                        carry[group_id, lane] += scratch[group_id, lane - (1 << r)]
                for group_id, lane in ti.ndrange(groups, self.wg):
                    if group_id < num_wgs and lane < BIN_COUNT:
                        scratch[group_id, lane] = carry[group_id, lane]

            for group_id, lane in ti.ndrange(groups, self.wg):
                if group_id < num_wgs:
                    key = key_reg[group_id, lane]
                    digit = extract_digit(key, shift)
                    local_offset = lane
                    if digit > 0:
                        local_offset -= ti.cast(scratch[group_id, digit - 1], ti.i32)
                    position = ti.cast(bin_base[group_id, digit], ti.i32) + local_offset
                    if position < num_keys:
                        keys[dst, position] = key
                        values[dst, position] = value_reg[group_id, lane]

            for group_id, lane in ti.ndrange(groups, self.wg):
                if group_id < num_wgs and lane < BIN_COUNT:
                    bin_base[group_id, lane] += counters[group_id, lane]
