import numpy as np
import taichi as ti
from taichi.lang.exception import TaichiCompilationError
from taichi.lang.impl import current_cfg, get_runtime

from tiradix.utils.constants import MAX_BUFFER_BYTES
from tiradix.utils.Exceptions import (AllocationFailure, CompileFailure, DeviceLost, EnvironmentUnavailable,
                                      RadixSortError, SubmissionFailure)


@ti.kernel
def copy_slot(count: int, slot: int, src: ti.types.ndarray(), dst: ti.types.ndarray()):
    for i in range(count):
        dst[i] = src[slot, i]


class Buffer(object):
    def __init__(self, label, shape, dtype, array):
        self.label = label
        self.shape = tuple(shape)
        self.dtype = dtype
        self.array = array

    @property
    def nbytes(self):
        return 4 * int(np.prod(self.shape))

    def map_read(self):
        return self.array.to_numpy()

    def __repr__(self):
        return f"Buffer({self.label!r}, shape={self.shape})"


class ClearBuffer(object):
    def __init__(self, buffer):
        self.buffer = buffer

    def execute(self):
        self.buffer.array.fill(0)


class CopyBufferToBuffer(object):
    def __init__(self, src, slot, dst, count):
        self.src = src
        self.slot = slot
        self.dst = dst
        self.count = count

    def execute(self):
        copy_slot(self.count, self.slot, self.src.array, self.dst.array)


class DebugMarker(object):
    def __init__(self, label, callback):
        self.label = label
        self.callback = callback

    def execute(self):
        if self.callback is not None:
            self.callback(self.label)


class Dispatch(object):
    def __init__(self, pipeline, args):
        self.pipeline = pipeline
        self.args = args

    def execute(self):
        self.pipeline.run(*[arg.array if isinstance(arg, Buffer) else arg for arg in self.args])


class CommandEncoder(object):
    """Records clears, copies and dispatches; nothing runs before submit."""
    def __init__(self, label=None):
        self.label = label
        self.commands = []
        self.finished = False

    def _record(self, command):
        if self.finished:
            raise RuntimeError(f"Command encoder {self.label} has already been finished")
        self.commands.append(command)

    def clear_buffer(self, buffer):
        self._record(ClearBuffer(buffer))

    def copy_buffer_to_buffer(self, src, slot, dst, count):
        if count > dst.shape[0] or count > src.shape[1]:
            raise ValueError(f"Cannot copy {count} elements from {src} to {dst}")
        self._record(CopyBufferToBuffer(src, slot, dst, count))

    def insert_debug_marker(self, label, callback=None):
        self._record(DebugMarker(label, callback))

    def dispatch(self, pipeline, *args):
        self._record(Dispatch(pipeline, args))

    def finish(self):
        self.finished = True
        return tuple(self.commands)


class Queue(object):
    def __init__(self):
        self.submitted = 0

    def write_buffer(self, buffer, data):
        if tuple(data.shape) != buffer.shape:
            raise ValueError(f"Cannot write data of shape {data.shape} into {buffer}")
        buffer.array.from_numpy(np.ascontiguousarray(data, dtype=np.uint32))

    def submit(self, command_buffer):
        self.submitted += 1
        try:
            for command in command_buffer:
                command.execute()
        except RadixSortError:
            raise
        except TaichiCompilationError as e:
            raise CompileFailure(f"Kernel compilation failed: {e}") from e
        except RuntimeError as e:
            raise SubmissionFailure(f"Submitted command sequence failed: {e}") from e

    def on_submitted_work_done(self):
        try:
            ti.sync()
        except RuntimeError as e:
            raise DeviceLost(f"Lost the device while waiting for submitted work: {e}") from e


class Device(object):
    _pipelines = {}

    def __init__(self, max_buffer_bytes=MAX_BUFFER_BYTES):
        self.arch = current_cfg().arch
        self.max_buffer_bytes = max_buffer_bytes
        self.queue = Queue()

    @classmethod
    def request(cls, max_buffer_bytes=MAX_BUFFER_BYTES):
        if get_runtime().prog is None:
            from tiradix import init
            init(arch="gpu", log=False)
        if get_runtime().prog is None:
            raise EnvironmentUnavailable("Taichi runtime is not initialized")
        return cls(max_buffer_bytes)

    def create_buffer(self, label, shape, dtype=ti.u32):
        shape = tuple(int(s) for s in shape)
        nbytes = 4 * int(np.prod(shape))
        if nbytes > self.max_buffer_bytes:
            raise AllocationFailure(f"Buffer {label} of {nbytes} bytes exceeds the device limit of {self.max_buffer_bytes} bytes")
        try:
            array = ti.ndarray(dtype, shape=shape)
        except RuntimeError as e:
            raise AllocationFailure(f"Failed to allocate buffer {label} of {nbytes} bytes: {e}") from e
        return Buffer(label, shape, dtype, array)

    @classmethod
    def reset_pipelines(cls):
        cls._pipelines.clear()

    def create_compute_pipeline(self, kernel_class, workgroup_size):
        # kernels of a data-oriented object are compiled once per instance
        key = (kernel_class, workgroup_size)
        if key not in Device._pipelines:
            Device._pipelines[key] = kernel_class(workgroup_size)
        return Device._pipelines[key]

    def create_command_encoder(self, label=None):
        return CommandEncoder(label)
