import pytest

from planetgen.params import PlanetParameters


class ConstantNoise:
    """Noise primitive returning fixed values and recording its calls."""

    def __init__(self, value=0.0, line=0.0):
        self.value = value
        self.line = line
        self.calls1 = []
        self.calls3 = []

    def noise1(self, x):
        self.calls1.append(x)
        return self.line

    def noise3(self, x, y, z):
        self.calls3.append((x, y, z))
        return self.value


class FixedDraws:
    """Random stream replaying a fixed list of draws, cycling when exhausted."""

    def __init__(self, *draws):
        self.draws = list(draws) or [0.0]
        self.count = 0

    def random_sample(self):
        value = self.draws[self.count % len(self.draws)]
        self.count += 1
        return value


@pytest.fixture
def earth():
    return PlanetParameters(
        radius=6357000.0,
        mass=5.9722e24,
        day=23.93 * 3600,
        roughness=0.1,
        temperature=15.0,
        water=0.57,
        terrestrial=True,
    )
