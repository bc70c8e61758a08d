"""
Schema validado para tiendas del flujo Pay-In-Store.

`StoreSummary.from_backend` es el único punto donde un registro crudo del
backend se convierte en un objeto de dominio: cada campo tiene un valor por
defecto explícito, de modo que la capa de presentación nunca recibe campos
ausentes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Marcas conocidas para detección de tiendas de marca
KNOWN_BRANDS = (
    "baskin", "robbins", "mcdonald", "kfc", "burger king", "starbucks", "subway",
    "dominos", "pizza hut", "central", "lifestyle", "westside", "pantaloons",
    "reliance", "shoppers stop", "max", "bata", "puma", "nike", "adidas",
    "decathlon", "croma", "vijay sales", "big bazaar", "dmart", "more",
    "spencer", "nature basket", "foodhall", "zara", "h&m", "uniqlo",
)

# Categorías/slugs que identifican proveedores de servicios
SERVICE_CATEGORIES = (
    "service", "salon", "spa", "beauty", "repair", "maintenance",
    "healthcare", "medical", "dental", "fitness", "gym", "yoga",
    "cleaning", "laundry", "car wash", "automotive",
)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

DEFAULT_OPEN_TIME = "09:00"
DEFAULT_CLOSE_TIME = "21:00"


class _BackendModel(BaseModel):
    """Base con alias camelCase para leer y serializar como el backend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class StoreCategoryRef(_BackendModel):
    id: str = Field(default="", validation_alias=AliasChoices("_id", "id"))
    name: str = "General"
    slug: str = "general"
    icon: Optional[str] = None

    @field_validator("name", "slug", mode="before")
    @classmethod
    def vacio_a_default(cls, value, info):
        if not value:
            return "General" if info.field_name == "name" else "general"
        return value


class StoreLocation(_BackendModel):
    address: str = ""
    city: str = ""
    state: Optional[str] = None
    pincode: Optional[str] = None
    # [longitud, latitud], igual que el backend
    coordinates: Optional[List[float]] = None

    @field_validator("address", "city", mode="before")
    @classmethod
    def none_a_vacio(cls, value):
        return value or ""

    @field_validator("coordinates", mode="before")
    @classmethod
    def normalizar_coordenadas(cls, value):
        if isinstance(value, dict):
            lat = value.get("latitude")
            lon = value.get("longitude")
            if lat is None or lon is None:
                return None
            return [lon, lat]
        return value


class PaymentSettings(_BackendModel):
    accept_upi: bool = Field(default=True, alias="acceptUPI")
    accept_cards: bool = True
    accept_pay_later: bool = False
    accept_rez_coins: bool = True
    accept_promo_coins: bool = True
    accept_pay_bill: bool = False
    max_coin_redemption_percent: float = 50
    allow_hybrid_payment: bool = True
    allow_offers: bool = True
    allow_cashback: bool = True
    upi_id: Optional[str] = None
    upi_name: Optional[str] = None


class RewardRules(_BackendModel):
    base_cashback_percent: float = 2
    review_bonus_coins: int = 10
    social_share_bonus_coins: int = 5
    minimum_amount_for_reward: float = 25
    extra_reward_threshold: Optional[float] = None
    extra_reward_coins: Optional[int] = None
    visit_milestone_rewards: Optional[List[Any]] = None


class Ratings(_BackendModel):
    average: float = 0
    count: int = 0

    @field_validator("average", "count", mode="before")
    @classmethod
    def none_a_cero(cls, value):
        return value or 0


class StoreOffers(_BackendModel):
    discount: float = 0
    cashback: float = 0
    max_cashback: Optional[float] = None
    min_order_amount: Optional[float] = None
    is_partner: bool = False
    partner_level: Optional[str] = None


class OperationalInfo(_BackendModel):
    delivery_time: Optional[str] = None
    minimum_order: Optional[float] = None
    delivery_fee: Optional[float] = None
    free_delivery_above: Optional[float] = None
    payment_methods: Optional[List[str]] = None
    is_open_now: bool = True
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None


class DeliveryCategories(_BackendModel):
    fast_delivery: bool = False
    budget_friendly: bool = False
    premium: bool = False
    organic: bool = False
    lowest_price: bool = False


class StoreAnalytics(_BackendModel):
    total_orders: Optional[int] = None
    followers_count: Optional[int] = None


class StoreContact(_BackendModel):
    phone: Optional[str] = None
    whatsapp: Optional[str] = None


class OpenStatus(BaseModel):
    is_open: bool
    open_time: Optional[str] = None
    close_time: Optional[str] = None


class StoreSummary(_BackendModel):
    """Tienda normalizada lista para mostrar en la pantalla de pago."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: str = ""
    slug: Optional[str] = None
    logo: Optional[str] = None
    description: Optional[str] = None
    category: StoreCategoryRef = Field(default_factory=StoreCategoryRef)
    location: StoreLocation = Field(default_factory=StoreLocation)
    distance: Optional[float] = None
    payment_settings: PaymentSettings = Field(default_factory=PaymentSettings)
    reward_rules: RewardRules = Field(default_factory=RewardRules)
    ratings: Ratings = Field(default_factory=Ratings)
    is_active: bool = True
    has_rez_pay: bool = True
    max_cashback: float = 0
    last_paid_at: Optional[str] = None
    total_payments: Optional[int] = None
    popularity_score: Optional[float] = None

    is_featured: bool = False
    is_brand: bool = False
    is_hot: bool = False
    is_local: bool = False
    is_online: bool = False
    is_verified: bool = False
    is_open: bool = True
    is_service: bool = False

    offers: StoreOffers = Field(default_factory=StoreOffers)
    operational_info: OperationalInfo = Field(default_factory=OperationalInfo)
    delivery_categories: DeliveryCategories = Field(default_factory=DeliveryCategories)
    analytics: StoreAnalytics = Field(default_factory=StoreAnalytics)
    contact: StoreContact = Field(default_factory=StoreContact)
    tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_backend(
        cls,
        store: Dict[str, Any],
        distance: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> "StoreSummary":
        """
        Transforma un registro crudo del backend en StoreSummary.

        Args:
            store: Dict tal como lo devuelve el backend (camelCase)
            distance: Distancia ya conocida; si es None se usa la del registro
            now: Momento de referencia para calcular si está abierta

        Returns:
            StoreSummary con todos los defaults aplicados

        Raises:
            pydantic.ValidationError: si falta el identificador o un tipo es inválido
        """
        operational = store.get("operationalInfo") or {}
        payment = store.get("paymentSettings") or {}
        rewards = store.get("rewardRules") or {}
        offers = store.get("offers") or {}
        category = store.get("category")
        if isinstance(category, str):
            category = {"name": category, "slug": category.lower()}

        open_status = is_store_open_now(operational.get("hours"), now=now)
        is_brand = detect_is_brand(store)
        is_service = detect_is_service(store)
        is_local = detect_is_local(store, is_brand, is_service)

        base_cashback = rewards.get("baseCashbackPercent")
        offer_cashback = offers.get("cashback") or base_cashback or 0

        has_rez_pay = operational.get("acceptsWalletPayment")
        if has_rez_pay is None:
            has_rez_pay = store.get("hasRezPay")

        return cls.model_validate(
            {
                "_id": store.get("_id") or store.get("id"),
                "name": store.get("name") or "",
                "slug": store.get("slug"),
                "logo": store.get("logo"),
                "description": store.get("description"),
                "category": category or {},
                "location": store.get("location") or {},
                "distance": distance if distance else store.get("distance"),
                "paymentSettings": _sin_nulos(payment),
                "rewardRules": _sin_nulos(rewards),
                "ratings": store.get("ratings") or {},
                "isActive": _primero_no_nulo(store.get("isActive"), True),
                "hasRezPay": _primero_no_nulo(has_rez_pay, True),
                "maxCashback": _primero_no_nulo(
                    base_cashback, offers.get("cashback"), store.get("maxCashback"), 0
                ),
                "lastPaidAt": store.get("lastPaidAt"),
                "totalPayments": store.get("totalPayments"),
                "popularityScore": store.get("popularityScore"),
                "isFeatured": bool(store.get("isFeatured")),
                "isBrand": is_brand,
                "isHot": bool(store.get("isHot")),
                "isLocal": is_local,
                "isOnline": bool(store.get("isOnline")),
                "isVerified": bool(store.get("isVerified")),
                "isOpen": open_status.is_open,
                "isService": is_service,
                "offers": {
                    "discount": offer_cashback,
                    "cashback": offer_cashback,
                    "maxCashback": offers.get("maxCashback"),
                    "minOrderAmount": offers.get("minOrderAmount"),
                    "isPartner": bool(offers.get("isPartner")),
                    "partnerLevel": offers.get("partnerLevel"),
                },
                "operationalInfo": {
                    "deliveryTime": operational.get("deliveryTime"),
                    "minimumOrder": operational.get("minimumOrder"),
                    "deliveryFee": operational.get("deliveryFee"),
                    "freeDeliveryAbove": operational.get("freeDeliveryAbove"),
                    "paymentMethods": operational.get("paymentMethods"),
                    "isOpenNow": open_status.is_open,
                    "openingTime": open_status.open_time,
                    "closingTime": open_status.close_time,
                },
                "deliveryCategories": _sin_nulos(store.get("deliveryCategories") or {}),
                "analytics": store.get("analytics") or {},
                "contact": store.get("contact") or {},
                "tags": store.get("tags") or [],
            }
        )

    @property
    def has_any_offer(self) -> bool:
        return self.offers.discount > 0 or self.offers.cashback > 0 or self.max_cashback > 0

    @property
    def has_cashback(self) -> bool:
        return self.offers.cashback > 0 or self.max_cashback > 0


def _primero_no_nulo(*valores):
    for valor in valores:
        if valor is not None:
            return valor
    return None


def _sin_nulos(data: Dict[str, Any]) -> Dict[str, Any]:
    # Un null explícito del backend equivale a campo ausente
    return {k: v for k, v in data.items() if v is not None}


def _minutos(hhmm: Any) -> Optional[int]:
    """Minutos desde medianoche de un "HH:MM"; None si no se puede leer."""
    if not isinstance(hhmm, str):
        return None
    partes = hhmm.strip().split(":")
    if len(partes) < 2:
        return None
    try:
        return int(partes[0]) * 60 + int(partes[1])
    except ValueError:
        return None


def is_store_open_now(
    hours: Optional[Dict[str, Any]], now: Optional[datetime] = None
) -> OpenStatus:
    """
    Calcula si la tienda está abierta según su horario semanal.

    Sin horario se asume abierta. Un día sin entrada o marcado `closed`
    se considera cerrado. Los extremos del rango cuentan como abierto.
    """
    if not hours:
        return OpenStatus(is_open=True)

    now = now or datetime.now()
    today = hours.get(WEEKDAYS[now.weekday()])
    if not today or today.get("closed"):
        return OpenStatus(is_open=False)

    open_time = today.get("open") or DEFAULT_OPEN_TIME
    close_time = today.get("close") or DEFAULT_CLOSE_TIME
    current = now.hour * 60 + now.minute
    apertura = _minutos(open_time)
    cierre = _minutos(close_time)
    # Horario ilegible se lee como cerrada
    abierta = apertura is not None and cierre is not None and apertura <= current <= cierre

    return OpenStatus(
        is_open=abierta,
        open_time=today.get("open"),
        close_time=today.get("close"),
    )


def _tags(store: Dict[str, Any]) -> List[str]:
    return [str(tag).lower() for tag in (store.get("tags") or [])]


def detect_is_brand(store: Dict[str, Any]) -> bool:
    """Marca: flag explícito, destacada, verificada, nombre conocido o tag 'brand'."""
    if store.get("isBrand") is True or store.get("isFeatured") is True:
        return True

    name = (store.get("name") or "").lower()
    if any(brand in name for brand in KNOWN_BRANDS):
        return True

    if any("brand" in tag for tag in _tags(store)):
        return True

    return store.get("isVerified") is True


def detect_is_service(store: Dict[str, Any]) -> bool:
    """Servicio: flag explícito, o categoría/tags con palabras de servicio."""
    if store.get("isService") is True:
        return True

    category = store.get("category")
    if isinstance(category, dict):
        category_name = (category.get("name") or "").lower()
        category_slug = (category.get("slug") or "").lower()
    else:
        category_name = category_slug = (category or "").lower()

    if any(svc in category_name or svc in category_slug for svc in SERVICE_CATEGORIES):
        return True

    return any(svc in tag for tag in _tags(store) for svc in SERVICE_CATEGORIES)


def detect_is_local(store: Dict[str, Any], is_brand: bool, is_service: bool) -> bool:
    """Local: flag explícito, ni marca ni servicio, o tag 'local'."""
    if store.get("isLocal") is True:
        return True
    if not is_brand and not is_service:
        return True
    return any("local" in tag for tag in _tags(store))
