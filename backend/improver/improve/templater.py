"""
Rule-based idea improver.

Classifies a free-text business idea (language + industry) and fills a fixed
website-prompt template from per-industry copy tables. Stateless and
deterministic: the same idea always yields the same prompt.

Industry detection is an ordered rule list, first match wins, so an idea
mentioning both a shop and a menu is ecommerce. Industries without a
dedicated table entry fall back to the generic copy.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from improver.improve.schemas import StandardResult, Summary, clean_idea

ARABIC_CHARS = re.compile(r"[\u0600-\u06FF]")


class Industry(str, Enum):
    ECOMMERCE = "ecommerce"
    RESTAURANT = "restaurant"
    PORTFOLIO = "portfolio"
    SAAS = "saas"
    HEALTH = "health"
    GENERIC = "generic"


@dataclass(frozen=True)
class Copy:
    en: str
    ar: str

    def pick(self, lang: str) -> str:
        return self.ar if lang == "ar" else self.en


# ═══════════════════════════════════════
# Classification rules
# ═══════════════════════════════════════

@dataclass(frozen=True)
class IndustryRule:
    industry: Industry
    patterns: tuple[re.Pattern, ...]

    def matches(self, lower: str) -> bool:
        return any(p.search(lower) for p in self.patterns)


INDUSTRY_RULES: tuple[IndustryRule, ...] = (
    IndustryRule(Industry.ECOMMERCE, (
        re.compile(r"e-?commerce|shop|store|products|checkout|cart|fashion|clothing"),
        re.compile(r"متجر|تجارة|الكتروني|إلكتروني|سلة|دفع|منتجات|ملابس|فاشون|تيشيرت|بنطلون"),
    )),
    IndustryRule(Industry.RESTAURANT, (
        re.compile(r"restaurant|cafe|food|menu|delivery"),
        re.compile(r"مطعم|كافيه|منيو|توصيل"),
    )),
    IndustryRule(Industry.PORTFOLIO, (
        re.compile(r"portfolio|cv|resume|designer|developer|freelancer"),
        re.compile(r"بورتفوليو|سيرة ذاتية|مصمم|مبرمج|فريلانس"),
    )),
    IndustryRule(Industry.SAAS, (
        re.compile(r"saas|app|platform|dashboard|tool|todo|tasks|task manager|productivity|kanban"),
    )),
    IndustryRule(Industry.HEALTH, (
        re.compile(r"clinic|doctor|dentist|health"),
        re.compile(r"عيادة|دكتور|طبيب|أسنان|صحة"),
    )),
)


@dataclass(frozen=True)
class StyleRule:
    applies: Callable[[str, Industry], bool]
    style: Copy


STYLE_RULES: tuple[StyleRule, ...] = (
    StyleRule(
        lambda lower, _: re.search(r"modern|minimal|clean", lower) is not None,
        Copy("Modern, minimal, high-contrast", "مودرن، مينيمال، واضح"),
    ),
    StyleRule(
        lambda lower, _: re.search(r"luxury|premium|elegant", lower) is not None,
        Copy("Premium, elegant, spacious", "فخم، أنيق، مساحات واسعة"),
    ),
    StyleRule(
        lambda _, industry: industry is Industry.PORTFOLIO,
        Copy("Clean, confident, case-study focused", "نظيف، واثق، يركز على المشاريع"),
    ),
    StyleRule(
        lambda _, industry: industry is Industry.ECOMMERCE,
        Copy("Commerce-first, clear, conversion-focused", "تجاري، واضح، يركز على التحويل"),
    ),
)
DEFAULT_STYLE = Copy("Friendly, clear, conversion-focused", "ودود، واضح، يركز على التحويل")


# ═══════════════════════════════════════
# Copy tables, keyed by industry (GENERIC is the fallback)
# ═══════════════════════════════════════

AUDIENCE = {
    Industry.PORTFOLIO: Copy(
        "Clients, recruiters, and collaborators evaluating your work",
        "عملاء محتملين + Recruiters + شركاء محتملين",
    ),
    Industry.ECOMMERCE: Copy(
        "Shoppers looking to discover and buy products online",
        "متسوقين بيبحثوا عن منتجات ويشتروا أونلاين",
    ),
    Industry.RESTAURANT: Copy(
        "People nearby looking for your menu and to order / book",
        "أشخاص قريبين عايزين يشوفوا المنيو ويطلبوا/يحجزوا",
    ),
    Industry.SAAS: Copy(
        "People looking for a simple, trustworthy productivity tool",
        "مستخدمين عايزين حل بسيط ومنظم",
    ),
    Industry.GENERIC: Copy(
        "People searching for your service online",
        "ناس بتدور على خدمتك أونلاين",
    ),
}

PAGES = {
    Industry.PORTFOLIO: ["Home", "Work (Projects)", "About", "Services", "Contact"],
    Industry.ECOMMERCE: [
        "Home", "Shop / Collections", "Product Details", "Cart / Checkout", "About", "Contact / Support",
    ],
    Industry.RESTAURANT: ["Home", "Menu", "Order / Reserve", "About", "Contact"],
    Industry.SAAS: ["Home", "Features", "Pricing", "About", "Contact"],
    Industry.GENERIC: ["Home", "Services", "About", "Contact"],
}

FEATURES = {
    Industry.ECOMMERCE: [
        Copy("Product categories + search", "تصنيفات + بحث"),
        Copy("Strong product pages (images, price, description)", "صفحات منتج قوية (صور/سعر/وصف)"),
        Copy("Cart + checkout", "سلة + دفع"),
        Copy("Shipping/returns + reviews (trust signals)", "معلومات شحن/استرجاع + Reviews"),
    ],
    Industry.PORTFOLIO: [
        Copy("Project gallery + case studies", "مشاريع + Case studies"),
        Copy("Skills + tools", "مهارات + أدوات"),
        Copy("Testimonials / credibility", "آراء عملاء / إثبات ثقة"),
        Copy("Contact form + calendar link", "فورم تواصل + لينك Calendar"),
    ],
    Industry.RESTAURANT: [
        Copy("Menu with prices", "منيو بالأسعار"),
        Copy("Order / reservation CTA", "CTA للطلب/الحجز"),
        Copy("Location + hours", "موقع + مواعيد"),
        Copy("Customer reviews", "Reviews"),
    ],
    Industry.SAAS: [
        Copy("Explain the product in 3 clear steps", "شرح الفكرة في 3 خطوات"),
        Copy("UI screenshots / simple mockups", "صور UI أو لقطات شاشة"),
        Copy("Strong CTA (start / sign up)", "CTA للتجربة / التسجيل"),
        Copy("FAQ to handle objections", "FAQ يقلل اعتراضات"),
    ],
    Industry.GENERIC: [
        Copy("Clear value proposition + CTA", "قيمة واضحة + CTA"),
        Copy("Social proof (testimonials/logos)", "Social proof"),
        Copy("Lead capture form", "Lead capture form"),
    ],
}

HERO_HEADLINE = {
    Industry.PORTFOLIO: Copy("Show your work. Get hired faster.", "اعرض شغلك. وخلي التوظيف أسهل."),
    Industry.ECOMMERCE: Copy("A clothing store people trust—and buy from.", "متجر ملابس أنيق — بيع أسهل."),
    Industry.RESTAURANT: Copy("Your menu, your story—ready to order.", "منيو واضح. طلب أسرع."),
    Industry.SAAS: Copy("Organize tasks without the chaos.", "نظّم مهامك في مكان واحد."),
    Industry.GENERIC: Copy("Turn your idea into a build-ready website.", "حوّل فكرتك لموقع جاهز."),
}

HERO_SUBHEADLINE = {
    Industry.PORTFOLIO: Copy(
        "A modern portfolio that highlights your best projects and makes it easy to contact you.",
        "بورتفوليو مودرن يبرز أفضل مشاريعِك ويخلي التواصل معاك سهل.",
    ),
    Industry.ECOMMERCE: Copy(
        "Build a clean ecommerce site with clear categories, strong product pages, and a smooth checkout.",
        "اعمل متجر ملابس سريع وواضح: تصنيفات، صفحات منتج قوية، ودفع سهل.",
    ),
    Industry.SAAS: Copy(
        "A clear landing page for a tasks app that explains value fast and drives sign-ups.",
        "صفحة هبوط واضحة لتطبيق مهام: تشرح القيمة بسرعة وتوجه المستخدم للتجربة.",
    ),
    Industry.GENERIC: Copy(
        "A crisp landing page with clear value, structured sections, and strong CTAs.",
        "صفحة هبوط مرتبة: قيمة واضحة، أقسام منظمة، وCTA قوي.",
    ),
}

PRIMARY_CTA = {
    Industry.PORTFOLIO: Copy("View my work", "شوف أعمالي"),
    Industry.ECOMMERCE: Copy("Shop now", "تسوّق الآن"),
    Industry.RESTAURANT: Copy("View menu", "شوف المنيو"),
    Industry.SAAS: Copy("Start free", "ابدأ مجانًا"),
    Industry.GENERIC: Copy("Get started", "ابدأ الآن"),
}

# No generic entry: industries missing here get no secondary CTA line
SECONDARY_CTA = {
    Industry.ECOMMERCE: Copy("See best sellers", "شوف العروض"),
    Industry.SAAS: Copy("See features", "شوف المميزات"),
    Industry.PORTFOLIO: Copy("Contact me", "تواصل معايا"),
}

PREVIEW = {
    Industry.PORTFOLIO: Copy("selected projects", "مشاريع مختارة"),
    Industry.ECOMMERCE: Copy("categories + best sellers", "تصنيفات + Best sellers"),
    Industry.SAAS: Copy("product features", "مميزات التطبيق"),
    Industry.GENERIC: Copy("services", "الخدمات"),
}

PRIMARY_GOAL = Copy("Turn visitors into a clear action (signup/lead)", "تحويل الزائر لعميل/Lead")

CONTENT_NEEDED = [
    Copy("Brand name + short description + logo/images", "اسم البراند + وصف مختصر + صور/لوجو"),
    Copy("Social links + contact method", "روابط سوشيال + وسيلة تواصل"),
]

CONSTRAINTS = [
    "Mobile-first",
    "Fast loading",
    "Accessible (WCAG-friendly)",
    "SEO basics (titles, meta, headings)",
]


def _lookup(table: dict, industry: Industry):
    return table.get(industry, table[Industry.GENERIC])


# ═══════════════════════════════════════
# Classification
# ═══════════════════════════════════════

def detect_language(text: str) -> str:
    return "ar" if ARABIC_CHARS.search(text) else "en"


def pick_industry(lower: str) -> Industry:
    for rule in INDUSTRY_RULES:
        if rule.matches(lower):
            return rule.industry
    return Industry.GENERIC


def pick_style(lower: str, industry: Industry, lang: str) -> str:
    for rule in STYLE_RULES:
        if rule.applies(lower, industry):
            return rule.style.pick(lang)
    return DEFAULT_STYLE.pick(lang)


def title_case(s: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in s.split(" ") if w)


# ═══════════════════════════════════════
# Template
# ═══════════════════════════════════════

def _home_sections(industry: Industry, lang: str) -> list[str]:
    preview = _lookup(PREVIEW, industry).pick(lang)
    sections = [
        Copy("1) Hero (headline, subheadline, CTA)", "1) Hero (عنوان + وصف + CTA)"),
        Copy("2) Benefits (3–5 bullets)", "2) Benefits (3–5 نقاط)"),
        Copy("3) Social proof (testimonials/logos)", "3) Social proof (Reviews/Logos)"),
        Copy(f"4) Preview ({preview})", f"4) Preview ({preview})"),
        Copy("5) How it works (3 steps)", "5) How it works (3 خطوات)"),
        Copy("6) FAQ (5 questions)", "6) FAQ (5 أسئلة)"),
        Copy("7) Final CTA + Lead form", "7) Final CTA + Lead form"),
    ]
    return [s.pick(lang) for s in sections]


def _bullets(items: list[str]) -> list[str]:
    return [f"- {item}" for item in items]


def improve_standard(raw: str) -> StandardResult:
    idea = clean_idea(raw)
    lower = idea.lower()
    lang = detect_language(idea)
    industry = pick_industry(lower)

    audience = _lookup(AUDIENCE, industry).pick(lang)
    style = pick_style(lower, industry, lang)
    pages = list(_lookup(PAGES, industry))
    features = [f.pick(lang) for f in _lookup(FEATURES, industry)]

    secondary: Optional[Copy] = SECONDARY_CTA.get(industry)

    lines: list[Optional[str]] = [
        f"Build-ready website prompt ({'Arabic' if lang == 'ar' else 'English'}):",
        "",
        f'Idea: "{idea}"',
        f"Website type: {title_case(industry.value)} website",
        f"Target audience: {audience}",
        f"Primary goal: {PRIMARY_GOAL.pick(lang)}",
        f"Tone & style: {style}",
        "",
        "Hero section copy:",
        f"- Headline: {_lookup(HERO_HEADLINE, industry).pick(lang)}",
        f"- Subheadline: {_lookup(HERO_SUBHEADLINE, industry).pick(lang)}",
        f"- Primary CTA: {_lookup(PRIMARY_CTA, industry).pick(lang)}",
        f"- Secondary CTA: {secondary.pick(lang)}" if secondary else None,
        "",
        "Suggested pages:",
        *_bullets(pages),
        "",
        "Home page sections (order):",
        *_home_sections(industry, lang),
        "",
        "Key features:",
        *_bullets(features),
        "",
        "Content needed from user:",
        *_bullets([c.pick(lang) for c in CONTENT_NEEDED]),
        "",
        "Constraints:",
        *_bullets(CONSTRAINTS),
    ]
    improved = "\n".join(line for line in lines if line is not None)

    return StandardResult(
        improved=improved,
        summary=Summary(
            audience=audience,
            pages=pages,
            style=style,
            features=features,
            lang=lang,
            industry=industry.value,
        ),
    )
