import taichi as ti

from tiradix.utils.constants import BIN_COUNT, ELEMENTS_PER_THREAD


class GroupMemory(object):
    """Stand-in for workgroup shared memory and for lane registers that live
    across barriers. Row ``g`` of every array belongs to group ``g`` of the
    kernel currently running; no kernel reads what a previous one left."""
    def __init__(self, device, groups, workgroup_size):
        self.groups = groups
        self.workgroup_size = workgroup_size
        self.tile = device.create_buffer("tile", (groups, ELEMENTS_PER_THREAD, workgroup_size))
        self.exchange = device.create_buffer("exchange", (groups, workgroup_size))
        self.scratch = device.create_buffer("scratch", (groups, workgroup_size))
        self.carry = device.create_buffer("carry", (groups, workgroup_size))
        self.counters = device.create_buffer("counters", (groups, BIN_COUNT))
        self.bin_base = device.create_buffer("bin_base", (groups, BIN_COUNT))
        self.key_reg = device.create_buffer("key_reg", (groups, workgroup_size))
        self.value_reg = device.create_buffer("value_reg", (groups, workgroup_size))
        self.rank_reg = device.create_buffer("rank_reg", (groups, workgroup_size), dtype=ti.i32)

    def nbytes(self):
        return 4 * self.groups * (self.workgroup_size * (ELEMENTS_PER_THREAD + 6) + 2 * BIN_COUNT)
