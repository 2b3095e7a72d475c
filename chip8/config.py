# CHIP-8 machine configuration.
# Memory map (Cowgod's CHIP-8 technical reference, http://devernay.free.fr/hacks/chip8/C8TECH10.HTM):
#   0x000-0x04F  reserved, zeroed
#   0x050-0x09F  built-in font, 16 digits x 5 bytes
#   0x200-0xFFF  program
#----------------------------------------------------------------------------------------------

# ---- Display ----
scale = 10
width, height = 64, 32

# ---- Clocks ----
cpu_hz = 700
timer_hz = 60

# ---- Memory ----
memory_size = 4096
font_start = 0x050
program_start = 0x200
max_program_size = memory_size - program_start  # 3584 bytes

# ---- Stack ----
stack_depth = 16

# ---- Random source ----
lfsr_seed = 0xB8

# Standard CHIP-8 fontset (80 bytes), one 8x5 sprite per hex digit
fontset = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
] #notice 80 bytes

font_end = font_start + len(fontset)  # 0x0A0, exclusive


#make it true if you want the logs
logs_on = False

def log(*args):
    if logs_on:
        print(*args)

def set_logs(flag):
    global logs_on
    logs_on = bool(flag)
