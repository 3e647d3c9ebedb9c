def div_ceil(a, b):
    return (a + b - 1) // b

def is_pow2(x):
    return x > 0 and (x & (x - 1)) == 0

def log2_int(x):
    return int(x).bit_length() - 1

def bytes_to_GB(sizes):
    return round(sizes / (1024 ** 3), 2)

def print_array(array, begin, end):
    return "[" + ", ".join(str(int(v)) for v in array[begin:end]) + "]"
