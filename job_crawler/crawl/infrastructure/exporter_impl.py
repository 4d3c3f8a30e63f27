"""
导出职位数据到输出目录：jobs.json 与 jobs.csv
导出前清洗字段：换行替换为空格、合并连续空白、None 输出为空字符串
"""

import csv
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Union

logger = logging.getLogger('domain.crawl_process')

_NEWLINES = re.compile(r'[\r\n]+')
_MULTI_SPACE = re.compile(r'\s\s+')


def prepare_output_directory(output_dir: Union[str, Path]) -> Path:
    """清空已存在的输出目录中的文件，或创建目录"""
    path = Path(output_dir)
    if path.exists():
        for child in path.iterdir():
            if child.is_file():
                child.unlink()
    else:
        path.mkdir(parents=True, exist_ok=True)
    return path


def _clean_value(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (list, tuple)):
        value = ','.join(str(item) for item in value)
    text = _NEWLINES.sub(' ', str(value))
    return _MULTI_SPACE.sub(' ', text).strip()


def clean_jobs(jobs: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """返回清洗后的新列表，不修改原数据"""
    return [{key: _clean_value(value) for key, value in job.items()} for job in jobs]


def export_jobs(jobs: List[Dict[str, Any]], output_dir: Union[str, Path]) -> None:
    """同时导出 JSON 与 CSV"""
    cleaned = clean_jobs(jobs)
    export_jobs_to_json(cleaned, output_dir)
    export_jobs_to_csv(cleaned, output_dir)


def export_jobs_to_json(jobs: List[Dict[str, Any]], output_dir: Union[str, Path]) -> Path:
    """覆盖写入 jobs.json"""
    file_path = Path(output_dir) / 'jobs.json'
    file_path.write_text(json.dumps(jobs, ensure_ascii=False, indent=2), encoding='utf-8')
    logger.info(f"导出 {len(jobs)} 个职位到 {file_path}")
    return file_path


def export_jobs_to_csv(jobs: List[Dict[str, Any]], output_dir: Union[str, Path]) -> Path:
    """写入 jobs.csv，所有值加引号；没有职位时写空文件"""
    file_path = Path(output_dir) / 'jobs.csv'

    if not jobs:
        file_path.write_text('', encoding='utf-8')
        logger.info("No jobs to export to CSV.")
        return file_path

    headers = list(jobs[0].keys())
    with file_path.open('w', encoding='utf-8', newline='') as f:
        writer = csv.DictWriter(
            f, fieldnames=headers, quoting=csv.QUOTE_ALL, lineterminator='\n', extrasaction='ignore'
        )
        writer.writeheader()
        writer.writerows(jobs)

    return file_path
