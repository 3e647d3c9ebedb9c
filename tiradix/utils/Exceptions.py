class RadixSortError(RuntimeError):
    """Base class of every failure raised by the sorting pipeline."""


class EnvironmentUnavailable(RadixSortError):
    """No compute-capable backend is reachable."""


class DeviceRequestFailure(RadixSortError):
    """The Taichi runtime refused to initialise."""


class AllocationFailure(RadixSortError):
    """A buffer request exceeds the device limits or could not be served."""


class CapacityExceeded(AllocationFailure):
    """The element count is beyond what the scan hierarchy can address."""


class CompileFailure(RadixSortError):
    """A kernel cannot be built for the requested configuration."""


class SubmissionFailure(RadixSortError):
    """The submitted command sequence failed before its results were mapped."""


class DeviceLost(SubmissionFailure):
    """The runtime went away while waiting for submitted work."""
