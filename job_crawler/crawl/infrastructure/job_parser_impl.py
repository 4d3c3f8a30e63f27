# infrastructure/job_parser_impl.py
import logging
import re
from typing import List, Optional, Tuple
from urllib.parse import urljoin
from bs4 import BeautifulSoup, Tag

from ..domain.demand_interface.i_job_parser import IJobParser
from ..domain.value_objects.job_record import JobRecord

error_logger = logging.getLogger('infrastructure.error')

# "2 000 – 3 000 EUR/mesiac"，上限可省略
SALARY_PATTERN = re.compile(r'([\d\s]+)(?:\s*–\s*([\d\s]+))?\s*(EUR)/([a-z]+)', re.IGNORECASE)
NEGOTIABLE_PATTERN = re.compile(r'dohodou', re.IGNORECASE)
POSTED_DATE_PATTERN = re.compile(r'(\d{1,2})\.(\d{1,2})\.(\d{4})')


class ProfesiaJobParserImpl(IJobParser):
    """基于BeautifulSoup的 Profesia.sk 职位详情页解析器"""

    def __init__(self, base_url: str = 'https://www.profesia.sk', parser: str = 'html.parser'):
        """
        参数:
            base_url: 站点根地址，用于把公司链接转换为绝对URL
            parser: BeautifulSoup 解析器类型，默认 Python 内置 'html.parser'
        """
        self._base_url = base_url
        self._parser = parser

    def parse(self, html: str, job_id: str, job_url: str) -> JobRecord:
        """解析职位详情HTML，缺失字段为 None，永不抛出异常"""
        try:
            soup = BeautifulSoup(html or '', self._parser)
        except Exception as e:
            error_logger.warning(f"HTML解析失败: {job_url} - {str(e)}")
            return JobRecord(job_id=job_id, job_url=job_url)

        job_title = self._first_text(soup, "h1[itemprop='title']")
        company_name = self._first_text(soup, "h2[itemprop='hiringOrganization'] span")
        salary_min, salary_max, salary_currency, salary_period = self._parse_salary(soup)

        return JobRecord(
            job_id=job_id,
            job_title=job_title,
            company_name=company_name,
            company_url=self._parse_company_url(soup, company_name),
            location=self._parse_location(soup),
            salary_min=salary_min,
            salary_max=salary_max,
            salary_currency=salary_currency,
            salary_period=salary_period,
            employment_type=self._first_text(soup, "span[itemprop='employmentType']"),
            tags=self._parse_tags(soup),
            posted_at=self._parse_posted_at(soup),
            job_url=job_url,
            description=self._first_text(soup, "div.details-desc"),
        )

# -------------------- 字段提取 --------------------

    @staticmethod
    def _first_text(soup: BeautifulSoup, selector: str) -> Optional[str]:
        element = soup.select_one(selector)
        if element is None:
            return None
        return element.get_text().strip() or None

    def _parse_company_url(self, soup: BeautifulSoup, company_name: Optional[str]) -> Optional[str]:
        """公司主页链接：span.hidden-xs 中文本包含公司名的第一个链接"""
        if not company_name:
            return None
        for link in soup.select("span.hidden-xs a"):
            href = link.get('href')
            if company_name in link.get_text() and href:
                return urljoin(self._base_url, href)
        return None

    @staticmethod
    def _parse_location(soup: BeautifulSoup) -> Optional[str]:
        """<strong>Miesto práce</strong><br><span>地点</span>"""
        for strong in soup.find_all('strong'):
            if 'Miesto práce' not in strong.get_text():
                continue
            br = strong.find_next_sibling()
            if not isinstance(br, Tag) or br.name != 'br':
                return None
            span = br.find_next_sibling()
            if not isinstance(span, Tag) or span.name != 'span':
                return None
            return span.get_text().strip() or None
        return None

    @staticmethod
    def _parse_salary(soup: BeautifulSoup) -> Tuple[Optional[int], Optional[int], Optional[str], Optional[str]]:
        element = soup.select_one(".salary-range")
        salary_text = element.get_text().strip() if element else ''
        if not salary_text or NEGOTIABLE_PATTERN.search(salary_text):
            return None, None, None, None

        match = SALARY_PATTERN.search(salary_text)
        if not match:
            return None, None, None, None

        min_digits = re.sub(r'\s', '', match.group(1))
        if not min_digits:
            return None, None, None, None
        salary_min = int(min_digits)

        max_digits = re.sub(r'\s', '', match.group(2) or '')
        salary_max = int(max_digits) if max_digits else salary_min

        return salary_min, salary_max, match.group(3), match.group(4)

    @staticmethod
    def _parse_tags(soup: BeautifulSoup) -> List[str]:
        tags = []
        for link in soup.select("span.hidden-xs a[href*='/praca/']"):
            tag = link.get_text().strip()
            if tag:
                tags.append(tag)
        return tags

    @staticmethod
    def _parse_posted_at(soup: BeautifulSoup) -> Optional[str]:
        """发布日期 d.m.yyyy，统一输出为 "YYYY-MM-DD" """
        for strong in soup.select(".padding-on-bottom strong"):
            if 'Dátum zverejnenia' not in strong.get_text():
                continue
            span = strong.find_next_sibling()
            if not isinstance(span, Tag) or span.name != 'span':
                continue
            match = POSTED_DATE_PATTERN.search(span.get_text().strip())
            if match:
                day, month, year = match.groups()
                return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
        return None
