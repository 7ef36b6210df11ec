import argparse
import json
import pytest
import zipfile
from main import JourneyPipeline, LoggingProgress, parse_arguments, run_ingest, run_map_journey
from pathlib import Path
from tests.fixtures import MARCH_FIFTEENTH_EPOCH, SampleRecords
from unittest.mock import Mock, patch


def make_args(**overrides) -> argparse.Namespace:
    defaults = {
        'command': 'map-journey',
        'dry_run': False,
        'verbose': False,
        'input_dir': Path('photos'),
        'output_dir': Path('results'),
        'zip_file': None,
        'years': [2024],
        'no_map': True,
        'body_file': None,
    }
    defaults.update(overrides)
    return argparse.Namespace(**defaults)


class TestJourneyPipeline:
    """Test suite for JourneyPipeline"""

    @pytest.fixture
    def input_dir(self, tmp_path):
        """Three photos: Paris in June, London in March, one without location"""
        input_dir = tmp_path / "input"
        SampleRecords.create_photo_dir(
            input_dir,
            {
                'IMG_0001.jpg': SampleRecords.takeout_sidecar(lat=48.8566, lon=2.3522),
                'IMG_0002.jpg': SampleRecords.takeout_sidecar(lat=51.5074, lon=-0.1278, timestamp=MARCH_FIFTEENTH_EPOCH),
                'IMG_0003.jpg': None,
            },
        )
        return input_dir

    @pytest.fixture
    def pipeline(self, input_dir, tmp_path):
        """Create pipeline instance with temporary directories"""
        return JourneyPipeline(input_dir=input_dir, output_dir=tmp_path / "output", accepted_years=[2024], render_map=False)

    def test_run_writes_outputs(self, pipeline):
        assert pipeline.run()

        with open(pipeline.output_dir / 'journey.json') as f:
            journey = json.load(f)

        assert journey['metadata']['total_photos_processed'] == 3
        assert journey['metadata']['accepted_photos'] == 2
        assert journey['metadata']['skipped_by_reason'] == {'no_location': 1}
        assert journey['metadata']['accepted_years'] == [2024]
        assert [point['latitude'] for point in journey['points']] == [51.5074, 48.8566]
        assert journey['points'][0]['source'].endswith('IMG_0002.jpg')

        with open(pipeline.output_dir / 'journey_stats.json') as f:
            stats = json.load(f)

        assert stats['total_photos'] == 2
        assert stats['duration_days'] == 78
        assert stats['share_text'].startswith('My 2024 Journey: 2 photos from 2 locations, ')

        summary = (pipeline.output_dir / 'journey_summary.md').read_text()
        assert summary.startswith('# My 2024 Journey')
        assert not (pipeline.output_dir / 'journey_map.html').exists()

    def test_run_renders_map(self, pipeline):
        pipeline.render_map = True
        assert pipeline.run()

        html = (pipeline.output_dir / 'journey_map.html').read_text()
        assert 'L.polyline' in html
        assert 'data:image/jpeg;base64,' in html

    def test_session_holds_journey(self, pipeline):
        pipeline.run()
        assert len(pipeline.session.journey) == 2
        assert pipeline.session.statistics.most_active_period == ('March', 1)

    def test_no_photos_in_accepted_years(self, input_dir, tmp_path):
        pipeline = JourneyPipeline(input_dir=input_dir, output_dir=tmp_path / "output", accepted_years=[2019], render_map=False)

        assert not pipeline.run()
        assert pipeline.session.last_outcome.skipped_by_reason() == {'no_location': 1, 'outside_accepted_years': 2}
        assert not (tmp_path / "output" / 'journey.json').exists()

    def test_missing_input_dir(self, tmp_path):
        pipeline = JourneyPipeline(input_dir=tmp_path / "missing", output_dir=tmp_path / "output", accepted_years=[2024])
        assert not pipeline.run()

    def test_dry_run(self, pipeline):
        """Test pipeline in dry run mode"""
        pipeline.dry_run = True
        assert pipeline.run()
        assert not pipeline.output_dir.exists()

    def test_corrupt_photo_is_skipped(self, pipeline, input_dir):
        (input_dir / 'IMG_0004.jpg').write_bytes(b'truncated')

        assert pipeline.run()
        assert pipeline.session.last_outcome.skipped_by_reason() == {'extraction_failed': 1, 'no_location': 1}


class TestLoggingProgress:
    """Test suite for the CLI progress sink"""

    def test_counts_calls(self):
        progress = LoggingProgress(every=2)
        for index in range(5):
            progress((index + 1) * 20.0, f"Processed {index + 1} of 5 photos")
        assert progress.calls == 5


class TestCommands:
    """Test suite for CLI command runners"""

    def test_parse_arguments_defaults(self):
        with patch('sys.argv', ['main.py']):
            args = parse_arguments()

        assert args.command == 'map-journey'
        assert args.years is None
        assert not args.no_map

    def test_parse_repeated_years(self):
        with patch('sys.argv', ['main.py', 'map-journey', '--year', '2023', '--year', '2024', '--no-map']):
            args = parse_arguments()

        assert args.years == [2023, 2024]
        assert args.no_map

    def test_map_journey_from_zip(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        source_dir = tmp_path / "source"
        SampleRecords.create_photo_dir(source_dir, {'IMG_0001.jpg': SampleRecords.takeout_sidecar()})

        zip_path = tmp_path / "upload.zip"
        with zipfile.ZipFile(zip_path, 'w') as zf:
            for path in source_dir.iterdir():
                zf.write(path, f"Takeout/{path.name}")

        args = make_args(zip_file=zip_path, output_dir=tmp_path / "output")
        assert run_map_journey(args)
        assert (tmp_path / "output" / 'journey.json').exists()
        assert not (tmp_path / 'temp_photo_extract').exists()

    def test_map_journey_bad_zip(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        zip_path = tmp_path / "upload.zip"
        zip_path.write_bytes(b'nope')

        assert not run_map_journey(make_args(zip_file=zip_path))

    @patch('main.TinyDBPhotoStore')
    def test_ingest_command(self, mock_store_class, tmp_path, capsys):
        mock_store = Mock()
        mock_store_class.return_value = mock_store

        body_file = tmp_path / "body.json"
        body_file.write_text(
            json.dumps({'username': 'traveler', 'lat': 1.0, 'long': 2.0, 'date_taken': '2024-06-01T10:00:00Z'})
        )

        assert run_ingest(make_args(command='ingest', body_file=body_file))
        mock_store.insert_many.assert_called_once()
        mock_store.close.assert_called_once()
        assert '"Received!"' in capsys.readouterr().out

    def test_ingest_missing_body_file(self, tmp_path):
        assert not run_ingest(make_args(command='ingest', body_file=tmp_path / "missing.json"))
