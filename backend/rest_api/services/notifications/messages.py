"""
WhatsApp message texts.

Formatting uses WhatsApp markdown (*bold*). Texts are in Portuguese,
the language of the establishments and their customers.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from shared.config.constants import OrderType


def format_brl(value: float) -> str:
    return f"R$ {value:.2f}"


def build_order_message(
    order_id: int,
    customer_name: str,
    order_type: str,
    items_text: str,
    total: float,
    payment_method: Optional[str],
) -> str:
    """Notification sent to the kitchen or cashier for a new order."""
    type_label = "Mesa" if order_type == OrderType.TABLE else "Delivery"
    return (
        f"*Pedido #{order_id} Recebido!*\n\n"
        f"*Cliente:* {customer_name}\n"
        f"*Tipo:* {type_label}\n\n"
        f"*Itens:*\n{items_text}\n\n"
        f"*Total: {format_brl(total)}*\n"
        f"*Pagamento:* {payment_method or ''}"
    )


def select_order_target(
    order_type: str,
    whatsapp_kitchen: Optional[str],
    whatsapp_cashier: Optional[str],
) -> Optional[str]:
    """Table orders go to the kitchen, delivery orders to the cashier."""
    return whatsapp_kitchen if order_type == OrderType.TABLE else whatsapp_cashier


def build_expiry_reminder(store_name: str, paid_until: date, days_left: int) -> str:
    if days_left <= 3:
        header = f"⚠️ *Atenção: seu plano Premium vence em {days_left} dias!*"
    else:
        header = f"*Seu plano Premium vence em {days_left} dias*"
    return (
        f"{header}\n\n"
        f"Olá, {store_name}! Sua assinatura é válida até {paid_until:%d/%m/%Y}.\n"
        "Renove para continuar com pedidos automáticos, reservas e IA."
    )


def build_expired_notice(store_name: str) -> str:
    return (
        "*Seu plano Premium expirou*\n\n"
        f"Olá, {store_name}! Sua conta voltou para o plano Gratuito.\n"
        "Renove a assinatura para reativar os recursos Premium."
    )


def build_operator_expired_notice(store_name: str, slug: str, owner_email: str) -> str:
    return f"*Plano expirado*\n\nLoja: {store_name} ({slug})\nE-mail: {owner_email}"


def build_renewal_confirmation(store_name: str, paid_until: date) -> str:
    return (
        "*Pagamento confirmado!*\n\n"
        f"Olá, {store_name}! Seu plano Premium está ativo até {paid_until:%d/%m/%Y}."
    )


def build_welcome_message(store_name: str, slug: str, password: str, paid_until: date) -> str:
    return (
        "*Bem-vindo ao MaisQueCardapio!*\n\n"
        f"Sua loja {store_name} foi criada.\n"
        f"Endereço: /{slug}\n"
        f"Senha de acesso: {password}\n"
        f"Plano Premium válido até {paid_until:%d/%m/%Y}."
    )


def build_upgrade_message(store_name: str, paid_until: date) -> str:
    return (
        "*Plano Premium ativado!*\n\n"
        f"Olá, {store_name}! Sua conta agora é Premium até {paid_until:%d/%m/%Y}."
    )
