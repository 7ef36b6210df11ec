import pytest
from core.coordinates import CoordinateResolver, NestedDmsStrategy, TopLevelDecimalStrategy
from core.models import GeoPoint
from fractions import Fraction
from tests.fixtures import SampleRecords
from utils.geo import dms_to_decimal, is_valid_coordinate, normalize_ref, to_number


class TestDmsConversion:
    """Test suite for degrees/minutes/seconds conversion"""

    @pytest.mark.parametrize(
        "dms",
        [(0, 0, 0), (48, 51, 24), (2, 21, 8), (89, 59, 59.99), (179, 30, 0), (12, 0, 36.5)],
    )
    def test_positive_hemispheres(self, dms):
        """N and E references keep the sign"""
        d, m, s = dms
        expected = d + m / 60 + s / 3600
        assert dms_to_decimal(list(dms), 'N') == pytest.approx(expected)
        assert dms_to_decimal(list(dms), 'E') == pytest.approx(expected)

    @pytest.mark.parametrize("dms", [(48, 51, 24), (33, 52, 4.2), (151, 12, 30)])
    def test_negative_hemispheres(self, dms):
        """S and W references negate the result"""
        d, m, s = dms
        expected = -(d + m / 60 + s / 3600)
        assert dms_to_decimal(list(dms), 'S') == pytest.approx(expected)
        assert dms_to_decimal(list(dms), 'W') == pytest.approx(expected)

    def test_missing_reference_is_positive(self):
        assert dms_to_decimal([10, 30, 0]) == pytest.approx(10.5)

    def test_malformed_triples(self):
        """Anything other than three numeric components is absent, not an error"""
        assert dms_to_decimal([48, 51], 'N') is None
        assert dms_to_decimal([48, 51, 24, 1], 'N') is None
        assert dms_to_decimal([48, 'x', 24], 'N') is None
        assert dms_to_decimal([48, None, 24], 'N') is None
        assert dms_to_decimal([True, 0, 0], 'N') is None
        assert dms_to_decimal('48,51,24', 'N') is None
        assert dms_to_decimal(48.5, 'N') is None
        assert dms_to_decimal(None, 'N') is None

    @pytest.mark.parametrize("dms", [(-48, 51, 24), (48, -51, 24), (48, 51, -24), (-0.5, 0, 0)])
    def test_negative_components_are_malformed(self, dms):
        """EXIF DMS parts are unsigned; a signed triple never flips hemispheres"""
        assert dms_to_decimal(list(dms), 'N', allowed_refs={'N', 'S'}) is None
        assert dms_to_decimal(list(dms), 'S', allowed_refs={'N', 'S'}) is None

    def test_rational_components(self):
        """EXIF rationals and numeric strings are accepted"""
        assert dms_to_decimal((Fraction(48, 1), Fraction(51, 1), Fraction(2400, 100)), 'N') == pytest.approx(48.856667, abs=1e-6)
        assert dms_to_decimal(['48', '51', '24'], 'N') == pytest.approx(48.856667, abs=1e-6)

    def test_invalid_reference_for_axis(self):
        assert dms_to_decimal([48, 51, 24], 'E', allowed_refs={'N', 'S'}) is None
        assert dms_to_decimal([48, 51, 24], 'X') is None

    def test_normalize_ref(self):
        assert normalize_ref(b'S\x00') == 'S'
        assert normalize_ref(' w ') == 'W'
        assert normalize_ref(None) is None

    def test_to_number(self):
        assert to_number(1) == 1.0
        assert to_number('2.5') == 2.5
        assert to_number(Fraction(1, 4)) == 0.25
        assert to_number(True) is None
        assert to_number(float('nan')) is None
        assert to_number(float('inf')) is None
        assert to_number('north') is None
        assert to_number([1]) is None


class TestCoordinateValidation:
    """Test suite for coordinate range checks"""

    def test_is_valid_coordinate(self):
        # Valid coordinates
        assert is_valid_coordinate(0, 0)
        assert is_valid_coordinate(-90, 180)
        assert is_valid_coordinate(90, -180)

        # Invalid coordinates
        assert not is_valid_coordinate(90.0001, 0)
        assert not is_valid_coordinate(0, -180.0001)
        assert not is_valid_coordinate(100, 200)


class TestCoordinateResolver:
    """Test suite for CoordinateResolver"""

    @pytest.fixture
    def resolver(self):
        """Create resolver instance"""
        return CoordinateResolver()

    def test_top_level_decimal(self, resolver):
        """Decimal fields at the top level resolve first"""
        point, method = resolver.resolve_with_method(SampleRecords.decimal_record())
        assert point == GeoPoint(48.8566, 2.3522)
        assert method == 'decimal'

    def test_nested_decimal(self, resolver):
        point, method = resolver.resolve_with_method(SampleRecords.nested_decimal_record())
        assert point == GeoPoint(40.7128, -74.0060)
        assert method == 'nested_decimal'

    def test_nested_dms(self, resolver):
        """DMS triples with N/E refs and no direct fields"""
        point, method = resolver.resolve_with_method(SampleRecords.dms_record())
        assert point.latitude == pytest.approx(48.856667, abs=1e-6)
        assert point.longitude == pytest.approx(2.352222, abs=1e-6)
        assert method == 'nested_dms'

    def test_top_level_dms(self, resolver):
        record = {
            'GPSLatitude': [33, 52, 4.2],
            'GPSLatitudeRef': 'S',
            'GPSLongitude': [151, 12, 30],
            'GPSLongitudeRef': 'E',
        }
        point, method = resolver.resolve_with_method(record)
        assert point.latitude == pytest.approx(-33.867833, abs=1e-6)
        assert point.longitude == pytest.approx(151.208333, abs=1e-6)
        assert method == 'dms'

    def test_takeout_geo_data(self, resolver):
        """Takeout sidecar geoData is a nested decimal structure"""
        record = {'geoData': {'latitude': 37.7749, 'longitude': -122.4194}}
        assert resolver.resolve(record) == GeoPoint(37.7749, -122.4194)

    def test_priority_order(self, resolver):
        """Top-level decimal wins over nested data"""
        record = {**SampleRecords.dms_record(), 'latitude': 10.0, 'longitude': 20.0}
        assert resolver.resolve(record) == GeoPoint(10.0, 20.0)

    def test_out_of_range_is_discarded_not_clamped(self, resolver):
        assert resolver.resolve({'latitude': 91.0, 'longitude': 0.0}) is None
        assert resolver.resolve({'latitude': 0.0, 'longitude': 180.5}) is None
        assert resolver.resolve({'GPS': {'GPSLatitude': [95, 0, 0], 'GPSLatitudeRef': 'N', 'GPSLongitude': [0, 0, 0]}}) is None

    def test_out_of_range_falls_through_to_next_method(self, resolver):
        record = {**SampleRecords.dms_record(), 'latitude': 200.0, 'longitude': 2.0}
        point, method = resolver.resolve_with_method(record)
        assert method == 'nested_dms'
        assert point.latitude == pytest.approx(48.856667, abs=1e-6)

    def test_partial_or_missing_data(self, resolver):
        """Absence of any field is non-fatal"""
        assert resolver.resolve({}) is None
        assert resolver.resolve({'latitude': 48.8566}) is None
        assert resolver.resolve({'latitude': None, 'longitude': None}) is None
        assert resolver.resolve({'GPS': {'GPSLatitude': [48, 51, 24], 'GPSLatitudeRef': 'N'}}) is None
        assert resolver.resolve({'GPS': 'not-a-mapping'}) is None
        assert resolver.resolve(SampleRecords.no_location_record()) is None
        assert resolver.resolve(None) is None

    def test_malformed_dms_is_absent(self, resolver):
        record = {'GPS': {'GPSLatitude': [48, 51], 'GPSLatitudeRef': 'N', 'GPSLongitude': [2, 21, 8], 'GPSLongitudeRef': 'E'}}
        assert resolver.resolve(record) is None

    def test_signed_dms_is_absent(self, resolver):
        record = {'GPS': {'GPSLatitude': [-33, 52, 4.2], 'GPSLatitudeRef': 'S', 'GPSLongitude': [151, 12, 30], 'GPSLongitudeRef': 'E'}}
        assert resolver.resolve(record) is None

    def test_zero_coordinates_are_valid(self, resolver):
        assert resolver.resolve({'latitude': 0.0, 'longitude': 0.0}) == GeoPoint(0.0, 0.0)

    def test_custom_strategies(self):
        """Adding a metadata shape is a list insertion"""
        resolver = CoordinateResolver(strategies=[NestedDmsStrategy(), TopLevelDecimalStrategy()])
        record = {**SampleRecords.dms_record(), 'latitude': 10.0, 'longitude': 20.0}
        _, method = resolver.resolve_with_method(record)
        assert method == 'nested_dms'

    def test_resolved_points_are_in_range(self, resolver):
        records = [
            SampleRecords.decimal_record(lat=lat, lon=lon)
            for lat in (-120.0, -90.0, -45.5, 0.0, 45.5, 90.0, 120.0)
            for lon in (-200.0, -180.0, 0.0, 180.0, 200.0)
        ]
        for record in records:
            point = resolver.resolve(record)
            if point is not None:
                assert abs(point.latitude) <= 90
                assert abs(point.longitude) <= 180
