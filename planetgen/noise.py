from opensimplex import OpenSimplex

# frequencies 1, 2, 4, 8, 16, 32
OCTAVES = 6


class SimplexNoise:
    """Noise primitive backed by OpenSimplex.

    The 1-D sampler is a slice of the 2-D field along y = 0.
    """

    def __init__(self, seed=0):
        self.seed = seed
        self._simplex = OpenSimplex(seed=seed)

    def noise1(self, x):
        return self._simplex.noise2(x, 0.0)

    def noise3(self, x, y, z):
        return self._simplex.noise3(x, y, z)


class FractalNoiseSampler:
    def __init__(self, noise):
        self.noise = noise

    def height(self, x, y, z):
        """Sum OCTAVES noise layers, doubling frequency and halving amplitude."""
        amp = 1.0
        freq = 1.0
        total = 0.0
        for _ in range(OCTAVES):
            total += amp * self.noise.noise3(x * freq, y * freq, z * freq)
            amp *= 0.5
            freq *= 2.0
        return total
