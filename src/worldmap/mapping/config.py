# -*- coding: utf-8 -*-

"""
mapping/config.py

This module centralizes the numerical limits and defaults used by the
projection, seam and picking code in `worldmap.mapping`. Keeping them in one
place keeps projections, graticule sampling and hit-testing consistent.

Contents:
---------
1. PROJECTION_LIMITS:
   - Latitude cutoffs and plane-domain tolerances for the four projections.
   - Mercator is cut at ±85° so that y stays finite.

2. MOLLWEIDE_SOLVER:
   - Iteration cap and tolerance for the Newton–Raphson solve of the
     auxiliary angle θ.

3. GRATICULE / OUTLINE:
   - Default spacing of parallels and meridians and the number of samples
     used to approximate curved lines and map boundaries.

4. CITY_PICK:
   - Pick radius (world units) and default filters for city hover lookup.

5. VIEWPORT:
   - Margin used when fitting the projection bounds into a pixel surface.

6. GEOJSON_PROPERTIES:
   - Property names (and their aliases) read from Natural Earth style
     GeoJSON files.

Usage:
------
    from worldmap.mapping.config import PROJECTION_LIMITS, MOLLWEIDE_SOLVER

"""
import math

# ───────────────────────────────────────────────────────────────────────────────
# 1) PROJECTION LIMITS (radians unless stated otherwise)
# ───────────────────────────────────────────────────────────────────────────────
PROJECTION_LIMITS = {
    'mercator_max_lat': math.radians(85.0),    # practical pole cutoff
    'near_pole_lat': math.radians(89.999),     # Lambert visibility limit
    'on_map_tol': 1e-9,                        # slack on disk/ellipse domains
    'orthographic_radius': 1.0,                # unit disk
    'lambert_radius': 2.0,                     # disk of radius 2R
    'lambert_antipode_eps': 1e-15,             # (1 + cos c) treated as zero
    'lambert_center_eps': 1e-15,               # rho treated as zero
    'mollweide_cos_eps': 1e-12,                # cos θ treated as zero
}

# ───────────────────────────────────────────────────────────────────────────────
# 2) MOLLWEIDE NEWTON–RAPHSON
# ───────────────────────────────────────────────────────────────────────────────
MOLLWEIDE_SOLVER = {
    'max_iter': 20,
    'tol': 1e-12,
    'min_derivative': 1e-300,   # below this the derivative has underflowed
}

# ───────────────────────────────────────────────────────────────────────────────
# 3) GRATICULE AND OUTLINE SAMPLING
# ───────────────────────────────────────────────────────────────────────────────
GRATICULE = {
    'lat_step_deg': 15.0,
    'lon_step_deg': 15.0,
    'samples': 360,
}

OUTLINE = {
    'samples': 360,
}

# ───────────────────────────────────────────────────────────────────────────────
# 4) CITY PICKING
# ───────────────────────────────────────────────────────────────────────────────
CITY_PICK = {
    'radius': 0.02,          # world units; roughly 1° of longitude in Mercator
    'min_population': 0,     # 0 disables the filter
    'max_scalerank': -1,     # negative disables the filter
}

# ───────────────────────────────────────────────────────────────────────────────
# 5) VIEWPORT
# ───────────────────────────────────────────────────────────────────────────────
VIEWPORT = {
    'margin': 0.05,          # fraction of the surface left empty on each side
}

# ───────────────────────────────────────────────────────────────────────────────
# 6) GEOJSON PROPERTY NAMES
# ───────────────────────────────────────────────────────────────────────────────
GEOJSON_PROPERTIES = {
    'region_name': ('ADMIN', 'admin', 'NAME', 'name'),
    'region_code': ('ISO_A3', 'iso_a3', 'ADM0_A3', 'adm0_a3'),
    'city_name': ('NAME', 'name', 'Name', 'NAMEASCII', 'nameascii'),
    'city_country': ('ADM0NAME', 'adm0name', 'Adm0Name', 'SOV0NAME', 'sov0name'),
    'city_population': ('POP_MAX', 'pop_max', 'Pop_Max'),
    'city_scalerank': ('SCALERANK', 'scalerank', 'ScaleRank'),
}
