import taichi as ti

from tiradix.kernels.KernelBase import KernelBase


@ti.data_oriented
class Scan(KernelBase):
    """In-place exclusive prefix sum of up to ``block_size`` entries by one group.

    Lane ``l`` owns entries ``4l .. 4l+3``. It scans them serially, the lane
    totals are scanned across the group with Hillis-Steele doubling, and the
    lane's exclusive prefix is added back to its four entries.
    """
    name = "scan"

    def dispatch_size(self, length):
        return 1

    @ti.kernel
    def run(self, length: int, table: ti.types.ndarray(), tile: ti.types.ndarray(), sums: ti.types.ndarray(), carry: ti.types.ndarray()):
        for lane in range(self.wg):
            for i in ti.static(range(self.ept)):
                data_index = i * self.wg + lane
                value = ti.u32(0)
                if data_index < length:
                    value = table[data_index]
                tile[0, data_index % self.ept, data_index // self.ept] = value

        for lane in range(self.wg):
            total = ti.u32(0)
            for i in ti.static(range(self.ept)):
                tmp = tile[0, i, lane]
                tile[0, i, lane] = total
                total += tmp
            sums[0, lane] = total
            carry[0, lane] = total

        for r in ti.static(range(self.rounds)):
            for lane in range(self.wg):
                if lane >= (1 << r):
                    carry[0, lane] += sums[0, lane - (1 << r)]
            for lane in range(self.wg):
                sums[0, lane] = carry[0, lane]

        for lane in range(self.wg):
            prefix = ti.u32(0)
            if lane > 0:
                prefix = sums[0, lane - 1]
            for i in ti.static(range(self.ept)):
                tile[0, i, lane] += prefix

        for lane in range(self.wg):
            for i in ti.static(range(self.ept)):
                data_index = i * self.wg + lane
                if data_index < length:
                    table[data_index] = tile[0, data_index % self.ept, data_index // self.ept]
