from .double_vector import DoubleVector, basis_vector
from .surface import CStarSurfaceCase, FixedPoint, CStarSurface, cstar_surface
from .divisor import CStarSurfaceDivisor
from .resolution import Resolution, primitive_vector, hilbert_basis_2D, toric_affine_surface_resolution, contract_prime_divisor, canonical_resolution, minimal_resolution
from .catalog_parse import generate_surfaces, generate_surface
