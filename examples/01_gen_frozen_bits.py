from fecsim.polar.frozenbits import FrozenBitsGA
from fecsim.tools import noise as noise_tools


if __name__ == "__main__":
    K = 4
    N = 8
    R = K / N
    ebn0 = 2.0

    fb_gen = FrozenBitsGA(K, N)
    fb_gen.set_noise(noise_tools.from_ebn0(ebn0, R))
    frozen = fb_gen.generate()

    print(" ".join("1" if f else "0" for f in frozen))
