from exmachina.schemas.site import PluginConfig, SiteConfig, SiteMetadata, Social

site_config = SiteConfig(
    siteMetadata=SiteMetadata(
        title="Ex Machina",
        author="W. Gómez",
        description="A blog on AI, ML, algorithmics and programming.",
        siteUrl="https://zxul767.dev",
        social=Social(github="zxul767", linkedin="wgomezj"),
    ),
    plugins=[
        PluginConfig(
            resolve="google-fonts",
            options={
                "fonts": [
                    "JetBrains Mono",
                    "Merriweather",
                    "Source Sans Pro:200,400,400i,700",
                ],
                "display": "swap",
                "attributes": {
                    "rel": "stylesheet preload prefetch",
                    "as": "style",
                },
            },
        ),
        PluginConfig(
            resolve="source-filesystem",
            options={"path": "content/blog", "name": "blog"},
        ),
        PluginConfig(
            resolve="source-filesystem",
            options={"path": "content/assets", "name": "assets"},
        ),
        PluginConfig(
            resolve="transformer-markdown",
            options={
                "plugins": [
                    "numbered-footnotes",
                    {"resolve": "images", "options": {"maxWidth": 590}},
                    {
                        "resolve": "responsive-iframe",
                        "options": {"wrapperStyle": "margin-bottom: 1.0725rem"},
                    },
                    {
                        "resolve": "syntax-highlight",
                        "options": {
                            "style": "friendly",
                            "inlineCode": {"marker": "•"},
                        },
                    },
                    "copy-linked-files",
                    "smartypants",
                    {"resolve": "katex", "options": {"strict": "ignore"}},
                ]
            },
        ),
        PluginConfig(
            resolve="manifest",
            options={
                "name": "Ex-Machina",
                "short_name": "Ex-Machina",
                "start_url": "/",
                "background_color": "#ffffff",
                "theme_color": "#663399",
                "display": "minimal-ui",
                "icon": "content/assets/ex-machina.png",
            },
        ),
        "remove-serviceworker",
        PluginConfig(
            resolve="typography",
            options={"pathToConfigModule": "exmachina.typography"},
        ),
        PluginConfig(
            resolve="page-progress",
            options={
                "includePaths": [],
                "excludePaths": ["/"],
                "height": 4,
                "color": "#81bfe6",
            },
        ),
        PluginConfig(resolve="feed", options={"output": "/rss.xml"}),
    ],
)
