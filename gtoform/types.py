import dataclasses
from typing import TypeAlias

import jax
from jax import numpy as jnp
import numpy as np

# Dynamic data
Array: TypeAlias = np.ndarray | jax.Array

# Static metadata
StaticArray: TypeAlias = np.ndarray

# A (possibly complex) scalar.
Scalar: TypeAlias = float | complex | jax.Array

# shape (3,)
Position3D: TypeAlias = np.ndarray | jax.Array


def promote_dataclass_fields(obj):
    """Converts all Array/StaticArray fields to jax/numpy arrays."""
    for field in dataclasses.fields(obj):
        value = getattr(obj, field.name)

        # Skip jax sentinels.
        if type(value) is object:
            continue

        if value is None:
            continue

        if field.type == Array:
            object.__setattr__(obj, field.name, jnp.asarray(value))
        elif field.type == StaticArray:
            object.__setattr__(obj, field.name, np.asarray(value))
