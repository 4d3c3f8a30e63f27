import logging
from typing import List, Optional
from ..domain.demand_interface.i_listing_page import IListingPage
from ..domain.value_objects.job_candidate import JobCandidate

error_logger = logging.getLogger('infrastructure.error')

_JOB_LINKS_SCRIPT = "links => links.map(a => ({id: a.id || null, url: a.href || null}))"

_PAGINATION_LINKS_SCRIPT = """(links, markers) => links
    .filter(a => a.href && a.href.includes(markers.listing) && !a.href.includes(markers.detail) && !a.id)
    .map(a => a.href)"""


class PlaywrightListingPage(IListingPage):
    """
    Playwright 渲染后的列表页
    选择器约定（Profesia.sk）：
    - 职位行: li.list-row h2 a（id 即职位ID）
    - 下一页: li > a.next
    - 备用分页: href 含 "praca"、不含 "detail"、且没有 id 的 <a>
    """

    JOB_LINK_SELECTOR = 'li.list-row h2 a'
    NEXT_PAGE_SELECTOR = 'li > a.next'

    def __init__(self, page, listing_marker: str = 'praca', detail_marker: str = 'detail'):
        """
        参数:
            page: playwright.async_api.Page
            listing_marker: 列表页路径标记
            detail_marker: 详情页路径标记
        """
        self._page = page
        self._listing_marker = listing_marker
        self._detail_marker = detail_marker

    @property
    def url(self) -> str:
        return self._page.url

    async def extract_job_candidates(self) -> List[JobCandidate]:
        rows = await self._page.eval_on_selector_all(self.JOB_LINK_SELECTOR, _JOB_LINKS_SCRIPT)
        return [JobCandidate(id=row.get('id'), url=row.get('url')) for row in rows]

    async def extract_next_page_url(self) -> Optional[str]:
        try:
            element = await self._page.query_selector(self.NEXT_PAGE_SELECTOR)
            if element is None:
                return None
            href = await element.evaluate("a => a.href")
            return href or None
        except Exception as e:
            # 找不到下一页按钮不算错误，回退到备用分页
            error_logger.debug(f"下一页链接提取失败: {self.url} - {str(e)}")
            return None

    async def extract_pagination_links(self) -> List[str]:
        return await self._page.eval_on_selector_all(
            'a',
            _PAGINATION_LINKS_SCRIPT,
            {'listing': self._listing_marker, 'detail': self._detail_marker}
        )
