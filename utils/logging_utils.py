from __future__ import annotations

import json
import os
import traceback
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from utils.output_utils import OutputLevel

# Numeric rank per level name; 'minimal' is an alias of 'basic'
LEVELS: Dict[str, int] = {'off': 0, 'minimal': 1, 'basic': 1, 'detail': 2, 'trace': 3}

# Aspect -> level used when neither log_<aspect> nor verbosity is set
ASPECT_DEFAULTS: Dict[str, str] = {
    'settings': 'basic',
    'events': 'off',
    'fetch': 'basic',
    'errors': 'basic',
}

_MIRROR_LEVELS: Dict[str, OutputLevel] = {
    'debug': OutputLevel.DEBUG,
    'warning': OutputLevel.WARNING,
    'error': OutputLevel.ERROR,
}


def _safe_str(x: Any) -> str:
    try:
        return str(x)
    except Exception:
        return '<unprintable>'


class LoggingHandler:
    """
    Structured run log for the quote viewer, configured from [LOG].

    Every record is one line (JSON or key=value text) tagged with an aspect:
    settings, events (Input/Output traffic), fetch (HTTP calls) or errors.
    An aspect is written only when its configured level reaches the level the
    record asks for. Nothing is written unless [LOG] active is set, and a
    failure to write never propagates to the caller.
    """

    def __init__(self, config, output_handler=None) -> None:
        self._config = config
        self._output = output_handler
        self._run_id = datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')

        fmt = str(self._opt('format', 'json') or 'json').strip().lower()
        self._write: Callable[[Dict[str, Any]], None] = (
            self._write_text if fmt == 'text' else self._write_json
        )
        self._mirror = bool(self._opt('mirror_to_console', False))
        self._truncate = int(self._opt('truncate_chars', 2000) or 2000)
        self._aspects = self._aspect_levels()

        self._log_path: Optional[str] = None
        if self._opt('active', False):
            self._log_path = self._open_logfile()

    # --- Public helpers -------------------------------------------------
    def active(self) -> bool:
        return self._log_path is not None

    @property
    def log_path(self) -> Optional[str]:
        return self._log_path

    def log(self, event: str, *, component: str, aspect: str, severity: str = 'info', data: Optional[dict] = None) -> None:
        self._record(event, component, aspect, data, severity=severity)

    def settings(self, effective: dict) -> None:
        self._record('settings', 'main', 'settings', effective)

    def input_event(self, details: dict, component: str = 'core.view_model') -> None:
        self._record('input', component, 'events', details)

    def output_event(self, details: dict, component: str = 'core.view_model') -> None:
        # Three Outputs per Input, so these need the detail level
        self._record('output', component, 'events', details, min_level='detail')

    def fetch_begin(self, meta: dict, component: str = 'providers.quote_service') -> None:
        self._record('fetch_begin', component, 'fetch', meta)

    def fetch_done(self, meta: dict, component: str = 'providers.quote_service') -> None:
        severity = 'info' if meta.get('ok', True) else 'warning'
        self._record('fetch_done', component, 'fetch', meta, severity=severity)

    def error(self, where: str, exc: BaseException, *, stack: Optional[str] = None) -> None:
        if stack is None:
            stack = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self._record('error', where, 'errors', {'message': _safe_str(exc), 'stack': stack}, severity='error')

    # --- Internals ------------------------------------------------------
    def _opt(self, key: str, fallback: Any = None) -> Any:
        try:
            return self._config.get_option('LOG', key, fallback)
        except Exception:
            return fallback

    def _aspect_levels(self) -> Dict[str, int]:
        verbosity = self._opt('verbosity', None)
        verbosity = verbosity.strip().lower() if isinstance(verbosity, str) and verbosity.strip() else None
        levels = {}
        for aspect, default in ASPECT_DEFAULTS.items():
            raw = self._opt(f'log_{aspect}', None)
            name = raw.strip().lower() if isinstance(raw, str) and raw.strip() else (verbosity or default)
            levels[aspect] = LEVELS.get(name, 0)
        return levels

    def _open_logfile(self) -> Optional[str]:
        # Relative directories hang off the project root, one level above utils/
        app_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        log_dir = os.path.expanduser(str(self._opt('dir', 'logs') or 'logs'))
        if not os.path.isabs(log_dir):
            log_dir = os.path.join(app_root, log_dir)

        name = str(self._opt('file', '') or '').strip()
        if not name:
            name = f'quotes-{self._run_id}.log' if self._opt('per_run', True) else 'quotes.log'
        path = os.path.join(log_dir, os.path.expanduser(name))

        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'a', encoding='utf-8'):
                pass
        except OSError:
            return None
        return path

    def _record(self, event: str, component: str, aspect: str, data: Optional[dict], *,
                severity: str = 'info', min_level: str = 'basic') -> None:
        if self._log_path is None or self._aspects.get(aspect, 0) < LEVELS[min_level]:
            return
        self._write({
            'ts': datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ'),
            'run_id': self._run_id,
            'event': event,
            'component': component,
            'aspect': aspect,
            'severity': severity,
            'data': self._clip(data or {}),
        })

    def _clip(self, obj: Any) -> Any:
        if isinstance(obj, str):
            if self._truncate and len(obj) > self._truncate:
                return obj[: self._truncate] + '…'
            return obj
        if isinstance(obj, dict):
            return {_safe_str(k): self._clip(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [self._clip(x) for x in obj]
        return obj

    def _append(self, line: str) -> None:
        try:
            with open(self._log_path, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
        except OSError:
            pass

    def _write_json(self, record: Dict[str, Any]) -> None:
        try:
            line = json.dumps(record, ensure_ascii=False)
        except (TypeError, ValueError):
            line = json.dumps({**record, 'data': _safe_str(record['data'])}, ensure_ascii=False)
        self._append(line)
        if self._mirror and self._output:
            self._output.debug(line)

    def _write_text(self, record: Dict[str, Any]) -> None:
        pairs = []
        for key, value in record['data'].items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value, ensure_ascii=False, default=_safe_str)
            pairs.append(f"{key}={value}")
        line = f"[{record['ts']}] {record['component']} {record['aspect']}:{record['event']} " + ' '.join(pairs)
        self._append(line)
        if self._mirror and self._output:
            level = _MIRROR_LEVELS.get(record['severity'], OutputLevel.INFO)
            self._output.write(line, level=level)
