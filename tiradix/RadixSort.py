from collections import namedtuple

import numpy as np

from tiradix.Device import Device
from tiradix.SortSettings import SortSettings
from tiradix.kernels import GroupMemory, Histogram, Reduce, Scan, ScanAdd, Scatter, ScanHierarchy
from tiradix.utils.constants import BIN_COUNT, BITS_PER_PASS, ELEMENTS_PER_THREAD, PASS_COUNT, PREVIEW_LENGTH, UINT32_MAX
from tiradix.utils.Exceptions import CapacityExceeded, RadixSortError
from tiradix.utils.linalg import print_array
from tiradix.utils.TimeTicker import Timer

SortResult = namedtuple("SortResult", ["keys", "values"])


def as_uint32(array, name):
    array = np.asarray(array)
    if array.ndim != 1:
        raise ValueError(f"/{name}/ should be a one-dimensional sequence, got shape {array.shape}")
    if array.size == 0 or array.dtype == np.uint32:
        return array.astype(np.uint32)
    if array.dtype.kind not in "iu":
        raise ValueError(f"/{name}/ should hold unsigned 32-bit integers, got dtype {array.dtype}")
    if array.min() < 0 or array.max() > UINT32_MAX:
        raise ValueError(f"/{name}/ should lie within [0, {UINT32_MAX}]")
    return array.astype(np.uint32)


# Reference: Harada, T., & Howes, L. (2011). Introduction to GPU Radix Sort. AMD.
class RadixSort(object):
    """Least-significant-digit radix sort of u32 keys and values, 4 bits per pass.

    Every pass runs Histogram -> Reduce -> Scan -> ScanAdd -> Scatter. Keys
    and values sit in 2-slot buffers: pass ``p`` reads slot ``p % 2`` and
    writes slot ``(p + 1) % 2``, so after the eight passes the result is back
    in slot 0.
    """
    def __init__(self, max_length, log=False, **kwargs):
        self.settings = SortSettings()
        self.settings.set_configuration(log=log, **kwargs)
        if self.settings.log:
            print('# =================================================================== #')
            print('#', "".center(67), '#')
            print('#', "Welcome to tiradix -- Multi-Kernel Radix Sort !".center(67), '#')
            print('#', "".center(67), '#')
            print('# =================================================================== #', '\n')

        self.state = "Idle"
        self.timer = Timer()
        self.capacity = max(int(max_length), 1)
        self.workgroup_size = self.settings.workgroup_size
        self.block_size = self.workgroup_size * ELEMENTS_PER_THREAD
        self.hierarchy = ScanHierarchy(self.block_size, self.settings.levels)
        self.hierarchy.check_capacity(self.capacity)

        self.device = Device.request(self.settings.max_buffer_bytes)
        self.histogram = self.device.create_compute_pipeline(Histogram, self.workgroup_size)
        self.reduce = self.device.create_compute_pipeline(Reduce, self.workgroup_size)
        self.scan = self.device.create_compute_pipeline(Scan, self.workgroup_size)
        self.scan_add = self.device.create_compute_pipeline(ScanAdd, self.workgroup_size)
        self.scatter = self.device.create_compute_pipeline(Scatter, self.workgroup_size)
        self.memory_allocate()
        if self.settings.log:
            self.print_basic_sort_info()
            print('\n')

    def memory_allocate(self):
        lengths = self.hierarchy.row_lengths(self.capacity)
        self.keys = self.device.create_buffer("keys", (2, self.capacity))
        self.values = self.device.create_buffer("values", (2, self.capacity))
        self.tables = [self.device.create_buffer(f"table_level{level}", (size,))
                       for level, size in enumerate(self.hierarchy.table_sizes(self.capacity))]
        self.readback_keys = self.device.create_buffer("readback_keys", (self.capacity,))
        self.readback_values = self.device.create_buffer("readback_values", (self.capacity,))
        self.memory = GroupMemory(self.device, max(lengths[0], BIN_COUNT * lengths[1]), self.workgroup_size)

    def print_basic_sort_info(self):
        print(" Radix Sort Configuration ".center(71, "-"))
        print(("Device Type: " + str(self.device.arch)).ljust(67))
        print(("Capacity: " + str(self.capacity)).ljust(67))
        print(("Workgroup Size: " + str(self.workgroup_size)).ljust(67))
        print(("Elements per Group: " + str(self.block_size)).ljust(67))
        print(("Scan Hierarchy Levels: " + str(self.settings.levels)).ljust(67))
        print(("Maximum Elements: " + str(self.hierarchy.max_elements())).ljust(67))
        print(("Group Memory: " + str(self.memory.nbytes()) + " bytes").ljust(67))

    def set_state(self, state):
        self.state = state

    def final_slot(self):
        return PASS_COUNT % 2

    def encode(self, num_keys):
        lengths = self.hierarchy.row_lengths(num_keys)
        groups = self.histogram.dispatch_size(num_keys)
        memory = self.memory

        encoder = self.device.create_command_encoder("radix_sort")
        for pass_index in range(PASS_COUNT):
            shift = pass_index * BITS_PER_PASS
            src, dst = pass_index % 2, (pass_index + 1) % 2
            encoder.insert_debug_marker(f"Pass {pass_index}", self.set_state)
            for table in self.tables:
                encoder.clear_buffer(table)

            encoder.dispatch(self.histogram, groups, shift, num_keys, src, self.keys, self.tables[0], memory.counters)
            for level in range(self.settings.levels):
                encoder.dispatch(self.reduce, self.reduce.dispatch_size(lengths[level]), lengths[level], self.tables[level],
                                 self.tables[level + 1], memory.scratch)
            encoder.dispatch(self.scan, BIN_COUNT * lengths[-1], self.tables[-1], memory.tile, memory.scratch, memory.carry)
            for level in reversed(range(self.settings.levels)):
                encoder.dispatch(self.scan_add, self.scan_add.dispatch_size(lengths[level]), lengths[level], self.tables[level + 1],
                                 self.tables[level], memory.tile, memory.scratch, memory.carry)
            encoder.dispatch(self.scatter, groups, shift, num_keys, src, dst, self.keys, self.values, self.tables[0], memory.exchange,
                             memory.scratch, memory.carry, memory.counters, memory.bin_base, memory.key_reg, memory.value_reg, memory.rank_reg)

        encoder.copy_buffer_to_buffer(self.keys, self.final_slot(), self.readback_keys, num_keys)
        encoder.copy_buffer_to_buffer(self.values, self.final_slot(), self.readback_values, num_keys)
        encoder.insert_debug_marker("Done", self.set_state)
        return encoder.finish()

    def upload(self, keys, values):
        staged = np.zeros((2, self.capacity), dtype=np.uint32)
        staged[0, :keys.shape[0]] = keys
        self.device.queue.write_buffer(self.keys, staged)
        staged[0, :values.shape[0]] = values
        self.device.queue.write_buffer(self.values, staged)

    def sort(self, keys, values=None):
        keys = as_uint32(keys, "keys")
        num_keys = keys.shape[0]
        values = np.arange(num_keys, dtype=np.uint32) if values is None else as_uint32(values, "values")
        if values.shape[0] != num_keys:
            raise ValueError(f"/values/ should pair one value with every key, got {values.shape[0]} values for {num_keys} keys")
        if num_keys > self.capacity:
            raise CapacityExceeded(f"{num_keys} elements exceed the capacity {self.capacity} this sorter was allocated for")
        if num_keys == 0:
            self.state = "Done"
            return SortResult(keys, values)

        if self.settings.verbose:
            self.print_preview("Input", keys, values)

        self.timer.begin("total")
        try:
            self.upload(keys, values)
            command_buffer = self.encode(num_keys)
            self.timer.begin("submit")
            self.device.queue.submit(command_buffer)
            self.device.queue.on_submitted_work_done()
            result = SortResult(self.readback_keys.map_read()[:num_keys].copy(), self.readback_values.map_read()[:num_keys].copy())
        except RadixSortError:
            self.state = "Failed"
            raise
        self.timer.end("submit")
        self.timer.end("total")

        if self.settings.verbose:
            self.print_preview("Final", result.keys, result.values)
        if self.settings.log:
            print(f"CPU time (submit -> readback complete): {self.timer.current('submit') * 1e3:.3f} ms")
            print(f"CPU total time (sort): {self.timer.current('total') * 1e3:.3f} ms")
        return result

    def print_preview(self, title, keys, values):
        num_keys = keys.shape[0]
        tail = max(num_keys - PREVIEW_LENGTH, 0)
        print(f"{title} keys:\n{print_array(keys, 0, PREVIEW_LENGTH)}\n{print_array(keys, tail, num_keys)}")
        print(f"{title} values:\n{print_array(values, 0, PREVIEW_LENGTH)}\n{print_array(values, tail, num_keys)}")
