import math

import numpy as np
import pytest

from worldmap.mapping.coords import GeoPoint, ProjPoint, wrap_longitude
from worldmap.mapping.projections import (
    LambertEqualAreaProjection,
    MercatorProjection,
    MollweideProjection,
    OrthographicProjection,
    ProjectionKind,
    create_projection,
)


def _grid(lat_max=70.0, step=10.0):
    for lon in np.arange(-170.0, 171.0, step):
        for lat in np.arange(-lat_max, lat_max + 0.1, step):
            yield GeoPoint.from_degrees(float(lon), float(lat))


def _all_projections():
    return [
        MercatorProjection(),
        MercatorProjection(math.radians(40.0)),
        OrthographicProjection(),
        OrthographicProjection(math.radians(-30.0), math.radians(45.0)),
        MollweideProjection(),
        MollweideProjection(math.radians(-100.0)),
        LambertEqualAreaProjection(),
        LambertEqualAreaProjection(math.radians(20.0), math.radians(-35.0)),
    ]


def _angle_diff(a, b):
    return abs(wrap_longitude(a - b))


@pytest.mark.parametrize('proj', _all_projections(), ids=repr)
def test_round_trip(proj):
    checked = 0
    for p in _grid():
        if not proj.is_visible(p):
            continue
        if isinstance(proj, OrthographicProjection) and proj.view_dot(p) < 0.1:
            continue  # asin is ill-conditioned at the limb
        if isinstance(proj, LambertEqualAreaProjection) and proj.forward(p).x ** 2 + proj.forward(p).y ** 2 > 3.5:
            continue  # near the antipode
        xy = proj.forward(p)
        back = proj.inverse(xy)
        assert back.is_defined()
        assert _angle_diff(back.lam, p.lam) < 1e-6
        assert abs(back.phi - p.phi) < 1e-6
        checked += 1
    assert checked > 20


@pytest.mark.parametrize('proj', _all_projections(), ids=repr)
def test_forward_of_visible_point_is_on_map(proj):
    points = list(_grid(lat_max=90.0, step=5.0))
    points += [GeoPoint(math.pi, 0.0), GeoPoint(-math.pi, 0.3), GeoPoint(0.0, math.pi / 2)]
    for p in points:
        if not proj.is_visible(p):
            continue
        xy = proj.forward(p)
        assert xy.is_defined()
        assert proj.is_on_map(xy), (p, xy)
        b = proj.bounds()
        assert b.xmin - 1e-9 <= xy.x <= b.xmax + 1e-9
        assert b.ymin - 1e-9 <= xy.y <= b.ymax + 1e-9


@pytest.mark.parametrize('proj', _all_projections(), ids=repr)
def test_outline_is_closed_and_on_map(proj):
    ring = proj.outline(72)
    assert ring.shape[1] == 2
    assert np.allclose(ring[0], ring[-1])
    for x, y in ring:
        assert proj.is_on_map(ProjPoint(x, y))


def test_mercator_latitude_cutoff():
    merc = MercatorProjection()
    assert merc.forward(GeoPoint.from_degrees(10.0, 89.0)) == merc.forward(GeoPoint.from_degrees(10.0, 85.0))
    assert merc.is_visible(GeoPoint.from_degrees(0.0, 85.0))
    assert not merc.is_visible(GeoPoint.from_degrees(0.0, 85.5))
    assert merc.bounds().ymax == pytest.approx(math.log(math.tan(math.pi / 4 + math.radians(85.0) / 2)))


def test_mercator_central_meridian_shifts_x():
    merc = MercatorProjection(math.radians(90.0))
    xy = merc.forward(GeoPoint.from_degrees(90.0, 0.0))
    assert xy.x == pytest.approx(0.0)
    assert xy.y == pytest.approx(0.0)


def test_seam_detection_cylindrical():
    merc = MercatorProjection()
    assert merc.crosses_seam(math.radians(179.0), math.radians(-179.0))
    assert not merc.crosses_seam(math.radians(10.0), math.radians(20.0))

    shifted = MollweideProjection(math.radians(90.0))
    # seam now at -90°
    assert shifted.crosses_seam(math.radians(-89.0), math.radians(-91.0))
    assert not shifted.crosses_seam(math.radians(179.0), math.radians(-179.0))


def test_azimuthal_projections_never_report_a_seam():
    # the azimuthal views have no longitude discontinuity to split on
    for proj in (OrthographicProjection(), LambertEqualAreaProjection()):
        assert not proj.crosses_seam(math.radians(179.0), math.radians(-179.0))
        assert not proj.crosses_seam(0.0, math.pi)


def test_orthographic_far_side_is_undefined():
    ortho = OrthographicProjection()
    far = GeoPoint.from_degrees(180.0, 0.0)
    assert not ortho.is_visible(far)
    assert not ortho.forward(far).is_defined()


def test_orthographic_inverse_domain():
    ortho = OrthographicProjection(0.4, 0.3)
    assert not ortho.inverse(ProjPoint(0.9, 0.9)).is_defined()
    assert ortho.inverse(ProjPoint(0.0, 0.0)) == ortho.center
    assert ortho.is_on_map(ProjPoint(1.0, 0.0))
    assert not ortho.is_on_map(ProjPoint(1.001, 0.0))


def test_lambert_antipode_maps_to_boundary_point():
    laea = LambertEqualAreaProjection()
    assert laea.forward(GeoPoint(math.pi, 0.0)) == ProjPoint(2.0, 0.0)


def test_lambert_inverse_domain():
    laea = LambertEqualAreaProjection(0.2, -0.1)
    assert not laea.inverse(ProjPoint(2.1, 0.0)).is_defined()
    assert laea.inverse(ProjPoint(0.0, 0.0)) == laea.center
    assert not laea.is_visible(GeoPoint(0.0, math.pi / 2))


def test_mollweide_pole_and_inverse_domain():
    moll = MollweideProjection()
    pole = moll.forward(GeoPoint(1.0, math.pi / 2))
    assert pole.x == pytest.approx(0.0, abs=1e-12)
    assert pole.y == pytest.approx(math.sqrt(2.0))
    back = moll.inverse(ProjPoint(0.0, math.sqrt(2.0)))
    assert back.phi == pytest.approx(math.pi / 2)
    assert back.lam == pytest.approx(0.0)
    assert not moll.inverse(ProjPoint(2.9, 0.0)).is_defined()
    assert moll.is_on_map(ProjPoint(2.0 * math.sqrt(2.0), 0.0))


def test_setters_validate_and_wrap():
    merc = MercatorProjection()
    merc.central_longitude = 3 * math.pi / 2
    assert merc.central_longitude == pytest.approx(-math.pi / 2)
    with pytest.raises(ValueError):
        merc.central_longitude = float('nan')

    ortho = OrthographicProjection()
    ortho.set_center(0.5, 0.25)
    assert tuple(ortho.center) == pytest.approx((0.5, 0.25))
    with pytest.raises(ValueError):
        ortho.set_center(float('inf'), 0.0)


def test_setter_changes_results_in_place():
    ortho = OrthographicProjection()
    p = GeoPoint.from_degrees(30.0, 0.0)
    before = ortho.forward(p)
    ortho.set_center(math.radians(30.0), 0.0)
    assert ortho.forward(p).x == pytest.approx(0.0)
    assert before.x > 0.4


def test_create_projection():
    assert isinstance(create_projection('mercator'), MercatorProjection)
    assert isinstance(create_projection(ProjectionKind.MOLLWEIDE), MollweideProjection)
    assert isinstance(create_projection('Lambert Azimuthal Equal-Area'), LambertEqualAreaProjection)
    ortho = create_projection('ORTHOGRAPHIC', GeoPoint(0.1, 0.2))
    assert isinstance(ortho, OrthographicProjection)
    assert tuple(ortho.center) == pytest.approx((0.1, 0.2))
    moll = create_projection('mollweide', GeoPoint(0.7, 0.5))
    assert moll.central_longitude == pytest.approx(0.7)
    with pytest.raises(ValueError):
        create_projection('gnomonic')


def test_names():
    assert MercatorProjection().name == 'Mercator'
    assert LambertEqualAreaProjection().kind is ProjectionKind.LAMBERT_EQUAL_AREA


def test_projections_compare_by_identity():
    assert MercatorProjection() != MercatorProjection()
