import logging
import math

import numpy as np
import pytest

from worldmap.mapping.features import MapContext
from worldmap.mapping.projections import MercatorProjection, OrthographicProjection
from worldmap.mapping.shape_cache import ShapeCache
from worldmap.mapping.tests.fixtures.regions import sample_context, square_region


def test_same_tuple_until_invalidated():
    cache = ShapeCache(sample_context())
    merc = MercatorProjection()
    first = cache.get_shapes(merc)
    assert cache.get_shapes(merc) is first
    assert cache.rebuild_count == 1

    cache.invalidate()
    assert not cache.is_current(merc)
    second = cache.get_shapes(merc)
    assert second is not first
    assert cache.rebuild_count == 2
    assert len(second) == len(first)
    for a, b in zip(first, second):
        assert a.feature is b.feature
        assert a.ring_index == b.ring_index
        assert np.array_equal(a.primary, b.primary)


def test_seam_region_contributes_split_shape():
    shapes = ShapeCache(sample_context()).get_shapes(MercatorProjection())
    # Centerland, Farland and the split Dateline ring
    assert len(shapes) == 3
    dateline = [s for s in shapes if s.feature.name == 'Dateline'][0]
    assert dateline.is_split


def test_new_projection_instance_triggers_rebuild():
    cache = ShapeCache(sample_context())
    a = MercatorProjection()
    b = MercatorProjection()
    shapes_a = cache.get_shapes(a)
    shapes_b = cache.get_shapes(b)
    assert shapes_a is not shapes_b
    assert cache.rebuild_count == 2
    assert cache.is_current(b)
    assert not cache.is_current(a)


def test_mutated_projection_needs_explicit_invalidate():
    cache = ShapeCache(sample_context())
    ortho = OrthographicProjection()
    before = cache.get_shapes(ortho)
    names_before = {s.feature.name for s in before}
    assert 'Farland' not in names_before

    ortho.set_center(math.radians(120.0), math.radians(40.0))
    # same instance: the cache still serves the old geometry
    assert cache.get_shapes(ortho) is before

    cache.invalidate()
    names_after = {s.feature.name for s in cache.get_shapes(ortho)}
    assert 'Farland' in names_after
    assert 'Centerland' not in names_after


def test_empty_context():
    cache = ShapeCache(MapContext())
    assert cache.get_shapes(MercatorProjection()) == ()
    assert cache.get_city_points(MercatorProjection()).tree is None


def test_invalid_arguments():
    with pytest.raises(ValueError):
        ShapeCache(None)
    cache = ShapeCache(sample_context())
    with pytest.raises(TypeError):
        cache.get_shapes(None)
    with pytest.raises(TypeError):
        cache.get_city_points(None)


def test_set_context_invalidates():
    cache = ShapeCache(sample_context())
    merc = MercatorProjection()
    cache.get_shapes(merc)
    cache.set_context(MapContext(regions=(square_region('Solo', 50.0, 0.0, 5.0),)))
    shapes = cache.get_shapes(merc)
    assert [s.feature.name for s in shapes] == ['Solo']


def test_city_points_are_visible_only_and_memoized():
    cache = ShapeCache(sample_context())
    ortho = OrthographicProjection()
    points = cache.get_city_points(ortho)
    assert [c.name for c in points.cities] == ['Alpha', 'Beta']
    assert points.xy.shape == (2, 2)
    assert cache.get_city_points(ortho) is points

    merc = MercatorProjection()
    assert len(cache.get_city_points(merc).cities) == 4

    cache.invalidate()
    assert cache.get_city_points(merc) is not points


def test_rebuild_and_invalidate_are_logged(caplog):
    caplog.set_level(logging.DEBUG, logger='worldmap.mapping.shape_cache')
    cache = ShapeCache(sample_context())
    cache.get_shapes(MercatorProjection())
    cache.invalidate()
    assert 'rebuilt 3 shapes for Mercator' in caplog.text
    assert 'shape cache invalidated' in caplog.text
