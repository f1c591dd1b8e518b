import json

from jobscraper.harvest import logging_config


def test_log_event_appends_jsonl(tmp_path, monkeypatch):
    monkeypatch.delenv('JOBSCRAPER_DISABLE_EVENTS', raising=False)
    monkeypatch.setattr(logging_config, 'LOG_DIR', tmp_path / 'logs')
    monkeypatch.setattr(logging_config, 'STRUCTURED_LOG_FILE', tmp_path / 'logs' / 'events.jsonl')
    logging_config.log_event('scrape_start', job_function='Design')
    logging_config.log_event('scrape_complete', job_function='Design', count=8, fallback=True)
    lines = (tmp_path / 'logs' / 'events.jsonl').read_text(encoding='utf-8').splitlines()
    recs = [json.loads(l) for l in lines]
    assert [r['event'] for r in recs] == ['scrape_start', 'scrape_complete']
    assert recs[1]['count'] == 8 and recs[1]['fallback'] is True
    assert 'ts' in recs[0]


def test_log_event_disabled(tmp_path, monkeypatch):
    monkeypatch.setenv('JOBSCRAPER_DISABLE_EVENTS', '1')
    monkeypatch.setattr(logging_config, 'STRUCTURED_LOG_FILE', tmp_path / 'events.jsonl')
    logging_config.log_event('scrape_start')
    assert not (tmp_path / 'events.jsonl').exists()
