import numpy as np

"""
This module implements center_of_mass which computes the mass-weighted mean of a position or velocity array, used to move a simulation into its barycentric frame. The function handles edge cases like empty arrays or zero total mass gracefully and assumes mass and vector arrays have compatible dimensions.


"""

def center_of_mass(masses: np.ndarray, vectors: np.ndarray) -> np.ndarray:
	total_mass = float(np.sum(masses))
	if total_mass == 0 or vectors.size == 0:
		return np.zeros(3)
	return np.sum(masses[:, None] * vectors, axis=0) / total_mass
