from __future__ import annotations

import os
import sys
import json

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from utils.logging_utils import LoggingHandler


class FakeConfig:
    def __init__(self, opts: dict):
        self._opts = opts

    def get_option(self, section: str, key: str, fallback=None):
        if section != 'LOG':
            return fallback
        return self._opts.get(key, fallback)


class CaptureOutput:
    def __init__(self):
        self.lines = []

    def write(self, message, **kwargs):
        self.lines.append(str(message))

    def debug(self, message, **kwargs):
        # Used by json writer mirror path
        self.lines.append(str(message))


def _read_payloads(tmp_path):
    files = list(tmp_path.glob('*.log'))
    assert files, 'No log files created'
    with files[0].open('r', encoding='utf-8') as f:
        return [json.loads(l) for l in f if l.strip()]


def test_json_logging_truncation(tmp_path):
    cfg = FakeConfig({
        'active': True,
        'dir': str(tmp_path),
        'per_run': True,
        'format': 'json',
        'mirror_to_console': False,
        'truncate_chars': 10,
        'log_settings': 'basic',
    })
    logger = LoggingHandler(cfg, output_handler=None)

    assert logger.active() is True
    assert os.path.basename(logger.log_path).startswith('quotes-')
    logger.settings({'endpoint': 'https://api.quotable.io/random', 'note': 'x' * 50})

    payload = _read_payloads(tmp_path)[-1]
    assert payload['event'] == 'settings'
    assert payload['aspect'] == 'settings'
    data = payload.get('data') or {}
    assert data.get('note', '').endswith('…')
    assert len(data.get('note')) == 11  # 10 chars + ellipsis


def test_text_logging_and_console_mirror(tmp_path):
    cap = CaptureOutput()
    cfg = FakeConfig({
        'active': True,
        'dir': str(tmp_path),
        'per_run': True,
        'format': 'text',
        'mirror_to_console': True,
        'log_settings': 'basic',
    })
    logger = LoggingHandler(cfg, output_handler=cap)
    logger.settings({'endpoint': 'e1'})

    # One text line mirrored to console
    assert any('settings' in line and 'endpoint=e1' in line for line in cap.lines)


def test_inactive_logger_writes_nothing(tmp_path):
    logger = LoggingHandler(FakeConfig({'active': False, 'dir': str(tmp_path)}))

    logger.settings({'k': 'v'})
    logger.fetch_done({'ok': False})

    assert logger.active() is False
    assert logger.log_path is None
    assert list(tmp_path.glob('*.log')) == []


def test_output_events_need_detail_level(tmp_path):
    cfg = FakeConfig({
        'active': True,
        'dir': str(tmp_path),
        'per_run': False,
        'log_events': 'basic',
    })
    logger = LoggingHandler(cfg)
    logger.input_event({'event': 'ViewAppeared'})
    logger.output_event({'event': 'RefreshEnabled', 'enabled': False})

    events = [p['event'] for p in _read_payloads(tmp_path)]
    assert events == ['input']
    assert os.path.basename(logger.log_path) == 'quotes.log'


def test_verbosity_applies_to_unset_aspects(tmp_path):
    cfg = FakeConfig({
        'active': True,
        'dir': str(tmp_path),
        'verbosity': 'detail',
        'log_fetch': 'off',
    })
    logger = LoggingHandler(cfg)
    logger.output_event({'event': 'RefreshEnabled', 'enabled': True})
    logger.fetch_begin({'endpoint': 'e1'})

    assert [p['event'] for p in _read_payloads(tmp_path)] == ['output']


def test_failed_fetch_and_errors_are_flagged(tmp_path):
    cfg = FakeConfig({'active': True, 'dir': str(tmp_path)})
    logger = LoggingHandler(cfg)
    logger.fetch_done({'ok': False, 'error': 'network down'})
    try:
        raise RuntimeError('boom')
    except RuntimeError as exc:
        logger.error('core.view_model', exc)

    done, err = _read_payloads(tmp_path)
    assert done['severity'] == 'warning'
    assert done['data']['error'] == 'network down'
    assert err['component'] == 'core.view_model'
    assert err['data']['message'] == 'boom'
    assert 'RuntimeError' in err['data']['stack']


def test_text_mirror_uses_record_severity(tmp_path):
    from utils.output_utils import OutputLevel

    class LevelCapture:
        def __init__(self):
            self.levels = []

        def write(self, message, level=None, **kwargs):
            self.levels.append(level)

    cap = LevelCapture()
    cfg = FakeConfig({
        'active': True,
        'dir': str(tmp_path),
        'format': 'text',
        'mirror_to_console': True,
    })
    logger = LoggingHandler(cfg, output_handler=cap)
    logger.fetch_begin({'endpoint': 'e1'})
    logger.fetch_done({'ok': False, 'error': 'network down'})

    assert cap.levels == [OutputLevel.INFO, OutputLevel.WARNING]


def test_explicit_file_name_is_used(tmp_path):
    cfg = FakeConfig({'active': True, 'dir': str(tmp_path), 'file': 'custom.log'})
    logger = LoggingHandler(cfg)

    assert logger.log_path == str(tmp_path / 'custom.log')
    assert logger.active() is True
