import taichi as ti

from tiradix.utils.constants import BIN_COUNT, DIGIT_MASK, ELEMENTS_PER_THREAD, MAX_WORKGROUP_SIZE, MIN_WORKGROUP_SIZE
from tiradix.utils.Exceptions import CompileFailure
from tiradix.utils.linalg import is_pow2, log2_int


@ti.func
def div_ceil(a, b):
    return (a + b - 1) // b


@ti.func
def extract_digit(key, shift):
    return ti.cast((key >> shift) & DIGIT_MASK, ti.i32)


@ti.data_oriented
class KernelBase(object):
    """Common launch geometry of the sorting kernels.

    Every kernel body is a chain of top-level loops over ``(group, lane)``;
    Taichi completes one top-level loop before it starts the next, which is
    the workgroup barrier between two phases. Values a lane keeps across a
    barrier are staged in :class:`GroupMemory` rows owned by its group.
    """
    name = "kernel"

    def __init__(self, workgroup_size):
        if not is_pow2(workgroup_size) or not MIN_WORKGROUP_SIZE <= workgroup_size <= MAX_WORKGROUP_SIZE:
            raise CompileFailure(f"{self.name}: workgroup size {workgroup_size} is not supported, "
                                 f"a power of two within [{MIN_WORKGROUP_SIZE}, {MAX_WORKGROUP_SIZE}] is required")
        self.wg = workgroup_size
        self.ept = ELEMENTS_PER_THREAD
        self.block_size = workgroup_size * ELEMENTS_PER_THREAD
        self.rounds = log2_int(workgroup_size)
        self.bin_rounds = log2_int(BIN_COUNT)

    def __repr__(self):
        return f"{type(self).__name__}(workgroup_size={self.wg})"
