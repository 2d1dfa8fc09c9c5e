from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def _safe_str(x: Any) -> str:
    try:
        return str(x)
    except Exception:
        return '<unprintable>'


class LoggingHandler:
    """
    File logging sink with per-aspect gating.

    - Format: JSONL or plain text
    - File policy: per-run timestamped file in [LOG].dir or explicit [LOG].file
    - Console mirror: optional via OutputHandler (when provided)
    - Redaction & truncation: applied to data payloads
    """

    _LEVELS = {
        'off': 0,
        'minimal': 1,
        'basic': 1,
        'detail': 2,
        'trace': 3,
    }

    # Input events stay off unless asked for
    _DEFAULTS = {
        'settings': 'basic',
        'input': 'off',
    }

    def __init__(self, config, output_handler=None) -> None:
        self._config = config
        self._output = output_handler
        self._active: bool = bool(self._get('active', False))
        self._format: str = str(self._get('format', 'json') or 'json').strip().lower()
        if self._format not in ('json', 'text'):
            self._format = 'json'
        self._mirror: bool = bool(self._get('mirror_to_console', False))
        self._redact: bool = bool(self._get('redact', True))
        self._truncate: int = int(self._get('truncate_chars', 2000) or 2000)

        verbosity = self._get('verbosity', None)
        verbosity = verbosity.strip().lower() if isinstance(verbosity, str) and verbosity.strip() else None
        self._aspects: Dict[str, int] = {}
        for asp, default in self._DEFAULTS.items():
            raw = self._get(f'log_{asp}', None)
            if isinstance(raw, str) and raw.strip():
                level_name = raw.strip().lower()
            else:
                level_name = verbosity or default
            self._aspects[asp] = self._LEVELS.get(level_name, self._LEVELS['off'])

        self._run_id = datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')
        self._log_path: Optional[str] = None
        if self._active:
            self._log_path = self._open_logfile()
        self._write = self._writer_json if self._format == 'json' else self._writer_text

    # --- Public helpers -------------------------------------------------
    def active(self) -> bool:
        return bool(self._active and self._log_path)

    @property
    def log_path(self) -> Optional[str]:
        return self._log_path

    def is_enabled(self, aspect: str, min_level: str = 'basic') -> bool:
        """Return True if logging is active and the given aspect meets the min level."""
        return self._should_log(aspect, min_level)

    def settings(self, effective: dict) -> None:
        if not self._should_log('settings', 'basic'): return
        self._write(self._prepare_payload('settings', 'config', 'settings', 'info', effective))

    def input_event(self, kind: str, details: dict, component: str = 'utils.input') -> None:
        if not self._should_log('input', 'basic'): return
        severity = 'warning' if kind == 'read_failed' else 'info'
        self._write(self._prepare_payload(kind, component, 'input', severity, details))

    # --- Internals ------------------------------------------------------
    def _get(self, key: str, fallback: Any = None) -> Any:
        try:
            return self._config.get_option('LOG', key, fallback)
        except Exception:
            return fallback

    def _open_logfile(self) -> Optional[str]:
        try:
            # Relative directories resolve against the application root (one level above utils/)
            app_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

            explicit = str(self._get('file', '') or '').strip()
            per_run = bool(self._get('per_run', True))
            raw_dir = os.path.expanduser(str(self._get('dir', 'logs') or 'logs'))
            log_dir = raw_dir if os.path.isabs(raw_dir) else os.path.join(app_root, raw_dir)
            os.makedirs(log_dir, exist_ok=True)

            if explicit:
                explicit = os.path.expanduser(explicit)
                path = explicit if os.path.isabs(explicit) else os.path.join(log_dir, explicit)
            else:
                filename = f'typed-prompt-{self._run_id}.log' if per_run else 'typed-prompt.log'
                path = os.path.join(log_dir, filename)
            os.makedirs(os.path.dirname(path) or log_dir, exist_ok=True)

            # Touch file
            with open(path, 'a', encoding='utf-8'):
                pass
            return path
        except OSError:
            return None

    def _should_log(self, aspect: str, min_level_name: str) -> bool:
        if not self._active or not self._log_path:
            return False
        return self._aspects.get(aspect, 0) >= self._LEVELS.get(min_level_name, 1)

    def _redact_keys(self) -> list:
        raw = self._get('redact_keys', None)
        if isinstance(raw, str) and raw.strip():
            return [k.strip().lower() for k in raw.split(',') if k.strip()]
        return []

    def _redact_and_truncate(self, data: Any) -> Any:
        keys = self._redact_keys()

        def _walk(obj: Any) -> Any:
            if isinstance(obj, str):
                if self._truncate and len(obj) > self._truncate:
                    return obj[: self._truncate] + '…'
                return obj
            if isinstance(obj, dict):
                out = {}
                for k, v in obj.items():
                    kk = _safe_str(k)
                    if self._redact and kk.lower() in keys:
                        out[kk] = '***redacted***'
                    else:
                        out[kk] = _walk(v)
                return out
            if isinstance(obj, list):
                return [_walk(x) for x in obj]
            return obj

        return _walk(data)

    def _prepare_payload(self, event: str, component: str, aspect: str, severity: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'ts': _now_iso(),
            'run_id': self._run_id,
            'event': event,
            'component': component,
            'aspect': aspect,
            'severity': severity,
            'data': self._redact_and_truncate(data or {}),
        }

    def _append(self, line: str) -> None:
        try:
            with open(self._log_path, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
        except OSError:
            pass

    def _writer_json(self, payload: Dict[str, Any]) -> None:
        line = json.dumps(payload, ensure_ascii=False, default=_safe_str)
        self._append(line)
        if self._mirror and self._output:
            self._output.debug(line)

    def _writer_text(self, payload: Dict[str, Any]) -> None:
        data = payload.get('data') or {}
        pairs = []
        for k, v in data.items():
            if isinstance(v, (dict, list)):
                v = json.dumps(v, ensure_ascii=False, default=_safe_str)
            pairs.append(f"{k}={v}")
        line = f"[{payload.get('ts')}] {payload.get('component')} {payload.get('aspect')}:{payload.get('event')} " + ' '.join(pairs)
        self._append(line)
        if self._mirror and self._output:
            from utils.output_utils import OutputLevel
            severity = (payload.get('severity') or '').lower()
            level = {
                'error': OutputLevel.ERROR,
                'warning': OutputLevel.WARNING,
                'debug': OutputLevel.DEBUG,
            }.get(severity, OutputLevel.INFO)
            self._output.write(line, level=level)
