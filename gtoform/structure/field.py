import dataclasses

import jax
from jax import numpy as jnp
import numpy as np

from gtoform import types


@dataclasses.dataclass(frozen=True)
class HomogeneousMagneticField:
    """A homogeneous magnetic field B with gauge origin G.

    The field is described by the vector potential
    A(r) = 1/2 B x (r - G)
    """

    # shape (3,)
    strength: types.StaticArray

    # shape (3,)
    gauge_origin: types.StaticArray = dataclasses.field(
        default_factory=lambda: np.zeros(3)
    )

    def __post_init__(self):
        strength = np.asarray(self.strength, dtype=np.float64)
        gauge_origin = np.asarray(self.gauge_origin, dtype=np.float64)
        if strength.shape != (3,) or gauge_origin.shape != (3,):
            raise ValueError(
                "The field strength and gauge origin must be 3-vectors."
            )

        object.__setattr__(self, "strength", strength)
        object.__setattr__(self, "gauge_origin", gauge_origin)

    def __eq__(self, other) -> bool:
        if not isinstance(other, HomogeneousMagneticField):
            return NotImplemented

        return np.array_equal(self.strength, other.strength) and np.array_equal(
            self.gauge_origin, other.gauge_origin
        )

    def vector_potential_at(self, position: types.Array) -> jax.Array:
        """Evaluates A(r) = 1/2 B x (r - G)."""
        r = jnp.asarray(position)
        return 0.5 * jnp.cross(jnp.asarray(self.strength), r - self.gauge_origin)
