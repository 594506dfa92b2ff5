"""
This module defines the Body class, a simple data container for individual celestial
bodies in the simulation.

The class stores fundamental properties (mass, position x/y/z, velocity vx/vy/vz) as
floating-point attributes and provides a clean string representation for debugging. It
serves as the basic building block for initial conditions before conversion
to the numpy array format used during simulation. The class makes no assumptions about
units or coordinate systems, leaving those decisions to the simulation layer.
"""
class Body:
	def __init__(
		self,
		mass: float,
		x: float = 0.0,
		y: float = 0.0,
		z: float = 0.0,
		vx: float = 0.0,
		vy: float = 0.0,
		vz: float = 0.0,
	):
		self.mass = float(mass)
		self.x = float(x)
		self.y = float(y)
		self.z = float(z)
		self.vx = float(vx)
		self.vy = float(vy)
		self.vz = float(vz)

	@property
	def position(self) -> tuple[float, float, float]:
		return (self.x, self.y, self.z)

	@property
	def velocity(self) -> tuple[float, float, float]:
		return (self.vx, self.vy, self.vz)

	def __repr__(self) -> str:
		return (f"Body(mass={self.mass}, x={self.x}, y={self.y}, z={self.z}, "
				f"vx={self.vx}, vy={self.vy}, vz={self.vz})")
