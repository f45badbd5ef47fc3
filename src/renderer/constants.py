"""Constants for the batch render pipeline."""

# Class marking the portable document root
DOCUMENT_ROOT_CLASS = "obsidian-document"
SIZER_CLASS = "markdown-sizer"
PUSHER_CLASS = "markdown-pusher"
PUSHER_STYLE = "width: 1px; height: 0.1px; margin-bottom: 0px;"
BANNER_SELECTOR = ".obsidian-banner-wrapper"
VIEW_CONTAINER_SELECTOR = ".view-content, .markdown-preview-view"

# Reserved class prefixes
PLUGIN_BLOCK_PREFIX = "block-language-"
FOREIGN_DECORATION_PREFIX = "mk-"

# Heading trees
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
HEADING_WRAPPER_CLASS = "heading-wrapper"
HEADING_CLASS = "heading"
HEADING_CHILDREN_CLASS = "heading-children"
HEADING_INDICATOR_CLASSES = ["heading-collapse-indicator", "collapse-indicator", "collapse-icon"]
LIST_INDICATOR_CLASSES = ["list-collapse-indicator", "collapse-indicator", "collapse-icon"]

ARROW_HTML = (
    "<svg xmlns='http://www.w3.org/2000/svg' width='24' height='24' viewBox='0 0 24 24' "
    "fill='none' stroke='currentColor' stroke-width='2' stroke-linecap='round' "
    "stroke-linejoin='round' class='svg-icon right-triangle'>"
    "<path d='M3 8L12 17L21 8'></path></svg>"
)

# Transclusion placeholders
EMBED_CONTENT_SELECTOR = ".markdown-embed-content"
CANVAS_EMBED_SELECTOR = ".markdown-embed-content.node-insert-event"
EXTERNAL_EMBED_CLASS = "external-markdown-embed"
EMBED_REFERENCE_CLASS = "markdown-embed-reference"

# Dynamic query blocks rendered by the view
QUERY_BLOCK_KEYWORDS = ("dataview", "dataviewjs")

# Media extensions
IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "svg", "gif", "bmp", "ico")
VIDEO_EXTENSIONS = ("mp4", "mov", "avi", "webm", "mpeg")
AUDIO_EXTENSIONS = ("mp3", "wav", "ogg", "aac")
EMBED_EXTENSIONS = ("pdf",)
VIEWABLE_MEDIA_EXTENSIONS = (
    *IMAGE_EXTENSIONS,
    *VIDEO_EXTENSIONS,
    *AUDIO_EXTENSIONS,
    *EMBED_EXTENSIONS,
    "html",
    "htm",
    "json",
    "txt",
    "yaml",
)
# "drawing" is an alias for excalidraw
CONVERTABLE_EXTENSIONS = ("md", "canvas", "drawing", "excalidraw", *VIEWABLE_MEDIA_EXTENSIONS)

# Progress colours
INFO_COLOR = "var(--text-normal)"
WARNING_COLOR = "var(--color-yellow)"
ERROR_COLOR = "var(--color-red)"
PROGRESS_COLOR = "var(--interactive-accent)"
INFO_BOX_COLOR = "rgba(0,0,0,0.15)"
WARNING_BOX_COLOR = "rgba(var(--color-yellow-rgb), 0.15)"
ERROR_BOX_COLOR = "rgba(var(--color-red-rgb), 0.15)"

# Log component names
COMPONENT_SESSION = "batch_session"
COMPONENT_DOCUMENT = "document_renderer"
COMPONENT_MARKDOWN = "markdown_renderer"
COMPONENT_CANVAS = "canvas_renderer"
COMPONENT_POST_PROCESS = "post_processor"
