"""
User-visible strings in traditional and simplified Chinese.

Every string is a (hant, hans) pair; `conv_by_var` picks the configured
variant.
"""

from __future__ import annotations

from wikireview_core.settings import settings


def conv_by_var(*, hant: str, hans: str, variant: str | None = None) -> str:
    variant = variant or settings.variant
    return hans if variant == "zh-hans" else hant


_MESSAGES: dict[str, tuple[str, str]] = {
    # Section edit client
    "append-success": ("已成功將內容附加到指定段落。", "已成功将内容附加到指定段落。"),
    "append-conflict": ("附加內容時發生編輯衝突。請重新嘗試。", "附加内容时发生编辑冲突。请重新尝试。"),
    "append-failed": ("附加內容失敗。請稍後再試。", "附加内容失败。请稍后再试。"),
    "replace-success": ("已成功更新指定段落。", "已成功更新指定段落。"),
    "replace-conflict": ("更新段落時發生編輯衝突。請重新嘗試。", "更新段落时发生编辑冲突。请重新尝试。"),
    "replace-failed": ("更新段落失敗。請稍後再試。", "更新段落失败。请稍后再试。"),
    "no-difference": ("無差異。", "无差异。"),
    # Check-writing wizard
    "dialog-title-prefix": ("檢查「", "检查「"),
    "dialog-title-suffix": ("」的文筆", "」的文笔"),
    "annotation-fallback-chapter": ("（未指定章節）", "（未指定章节）"),
    "import-success": ("已從檔案載入批註。", "已从文件载入批注。"),
    "import-error": ("載入檔案時發生錯誤。", "读取文件时发生错误。"),
    "import-invalid": ("無效的批註檔案。", "无效的批注文件。"),
    "import-no-page": ("無法識別條目名稱，無法載入檔案中的批註。", "无法识别条目名称，无法载入文件中的批注。"),
    "load-no-page": ("無法識別條目名稱，無法載入批註。", "无法识别条目名称，无法载入批注。"),
    "load-empty": ("目前沒有可載入的批註。", "目前没有可载入的批注。"),
    "load-empty-chapters": ("批註內容為空，請稍後再試。", "批注内容为空，请稍后再试。"),
    "load-success": ("已將批註載入表單，請檢查後繼續。", "已将批注载入表单，请检查后继续。"),
    "save-no-section": (
        "無法識別文筆章節編號，請在討論頁的文筆章節附近點擊「檢查文筆」。",
        "无法识别文笔章节编号，请在讨论页的文笔章节附近点击“检查文笔”。",
    ),
    "save-empty": ("請先輸入文筆建議內容，再嘗試儲存。", "请先输入文笔建议内容，再尝试保存。"),
    "save-failed": ("新增文筆建議失敗，請稍後再試。", "新增文笔建议失败，请稍后再试。"),
    "edit-summary": (
        "使用 [[User:SuperGrey/gadgets/ReviewTool|ReviewTool]] 新增文筆建議",
        "使用 [[User:SuperGrey/gadgets/ReviewTool|ReviewTool]] 新增文笔建议",
    ),
    # Page info
    "page-info-error": ("無法獲取 XTools 頁面資訊。", "无法获取 XTools 页面信息。"),
}


def message(key: str, *, variant: str | None = None) -> str:
    hant, hans = _MESSAGES[key]
    return conv_by_var(hant=hant, hans=hans, variant=variant)
