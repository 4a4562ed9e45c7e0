"""Shop and product management: commands and handlers.

Every product command names the acting vendor; the product's shop must be
owned by that vendor.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.lookup import get_owned_product, get_owned_shop
from marketplace.catalogue.product import Product
from marketplace.catalogue.shop import Shop
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Shop")
class CreateShop:
    vendor_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    description = Text()


@marketplace.command(part_of="Product")
class CreateProduct:
    vendor_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    discount = Float(min_value=0.0)
    delivery_charge = Float(min_value=0.0)
    stock = Integer(min_value=0)
    status = String(max_length=20)
    sku = String(max_length=50)
    description = Text()


@marketplace.command(part_of="Product")
class AddVariant:
    vendor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    value = String(required=True, max_length=100)
    price_diff = Float()
    stock = Integer(min_value=0)


@marketplace.command(part_of="Product")
class AddProductImage:
    vendor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    url = String(required=True, max_length=500)


@marketplace.command(part_of="Product")
class ChangeProductStatus:
    vendor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@marketplace.command(part_of="Product")
class UpdateProductPricing:
    vendor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    price = Float(min_value=0.0)
    discount = Float(min_value=0.0)
    delivery_charge = Float(min_value=0.0)


@marketplace.command(part_of="Product")
class RestockProduct:
    vendor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    variant_id = Identifier()


@marketplace.command_handler(part_of=Shop)
class ManageShopHandler:
    @handle(CreateShop)
    def create_shop(self, command):
        shop = Shop.create(
            vendor_id=command.vendor_id,
            name=command.name,
            description=command.description,
        )
        current_domain.repository_for(Shop).add(shop)

        logger.info("Shop created", shop_id=str(shop.id), vendor_id=str(command.vendor_id))
        return str(shop.id)


@marketplace.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        get_owned_shop(command.shop_id, command.vendor_id)

        product = Product.create(
            shop_id=command.shop_id,
            name=command.name,
            price=command.price,
            discount=command.discount,
            delivery_charge=command.delivery_charge,
            stock=command.stock,
            status=command.status,
            sku=command.sku,
            description=command.description,
        )
        current_domain.repository_for(Product).add(product)

        logger.info(
            "Product created",
            product_id=str(product.id),
            shop_id=str(command.shop_id),
            stock=product.stock,
        )
        return str(product.id)

    @handle(AddVariant)
    def add_variant(self, command):
        product = get_owned_product(command.product_id, command.vendor_id)
        variant = product.add_variant(
            name=command.name,
            value=command.value,
            price_diff=command.price_diff,
            stock=command.stock,
        )
        current_domain.repository_for(Product).add(product)
        return str(variant.id)

    @handle(AddProductImage)
    def add_image(self, command):
        product = get_owned_product(command.product_id, command.vendor_id)
        image = product.add_image(command.url)
        current_domain.repository_for(Product).add(product)
        return str(image.id)

    @handle(ChangeProductStatus)
    def change_status(self, command):
        product = get_owned_product(command.product_id, command.vendor_id)
        product.change_status(command.status)
        current_domain.repository_for(Product).add(product)

        logger.info("Product status changed", product_id=str(product.id), status=product.status)

    @handle(UpdateProductPricing)
    def update_pricing(self, command):
        product = get_owned_product(command.product_id, command.vendor_id)
        product.update_pricing(
            price=command.price,
            discount=command.discount,
            delivery_charge=command.delivery_charge,
        )
        current_domain.repository_for(Product).add(product)

    @handle(RestockProduct)
    def restock(self, command):
        product = get_owned_product(command.product_id, command.vendor_id)
        product.restock(command.quantity, variant_id=command.variant_id)
        current_domain.repository_for(Product).add(product)

        logger.info(
            "Product restocked",
            product_id=str(product.id),
            variant_id=str(command.variant_id) if command.variant_id else None,
            quantity=command.quantity,
            stock=product.stock,
        )
