"""
JSON shapes for the API.

Keys are camelCase because that is what the dashboard and the public booking
page consume. Money on stored rows is rendered as a two-decimal string
("55.00"), times as "HH:MM" and dates as ISO "YYYY-MM-DD".
"""


def money(value):
    if value is None:
        return None
    return f"{value:.2f}"


def hhmm(value):
    return value.strftime("%H:%M") if value else None


def iso(value):
    return value.isoformat() if value else None


def user_to_dict(user):
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "phone": user.phone,
        "role": user.role,
        "createdAt": iso(user.created_at),
    }


def barbershop_to_dict(shop):
    return {
        "id": shop.id,
        "ownerId": shop.owner_id,
        "name": shop.name,
        "slug": shop.slug,
        "description": shop.description,
        "address": shop.address,
        "phone": shop.phone,
        "email": shop.email,
        "logoUrl": shop.logo_url,
        "coverUrl": shop.cover_url,
        "primaryColor": shop.primary_color,
        "openingTime": hhmm(shop.opening_time),
        "closingTime": hhmm(shop.closing_time),
        "workDays": shop.work_days,
        "subscriptionPlan": shop.subscription_plan,
        "subscriptionStatus": shop.subscription_status,
        "createdAt": iso(shop.created_at),
        "updatedAt": iso(shop.updated_at),
    }


def public_barbershop_to_dict(shop):
    """Public booking page view: no owner or subscription details."""
    data = barbershop_to_dict(shop)
    for key in ("ownerId", "subscriptionPlan", "subscriptionStatus", "updatedAt"):
        data.pop(key)
    return data


def barber_to_dict(barber):
    return {
        "id": barber.id,
        "barbershopId": barber.barbershop_id,
        "userId": barber.user_id,
        "name": barber.name,
        "email": barber.email,
        "phone": barber.phone,
        "photoUrl": barber.photo_url,
        "bio": barber.bio,
        "commissionRate": money(barber.commission_rate),
        "isActive": barber.is_active,
        "workStartTime": hhmm(barber.work_start_time),
        "workEndTime": hhmm(barber.work_end_time),
        "workDays": barber.work_days,
        "createdAt": iso(barber.created_at),
    }


def category_to_dict(category):
    return {
        "id": category.id,
        "barbershopId": category.barbershop_id,
        "name": category.name,
        "description": category.description,
        "sortOrder": category.sort_order,
        "createdAt": iso(category.created_at),
    }


def service_to_dict(service):
    return {
        "id": service.id,
        "barbershopId": service.barbershop_id,
        "categoryId": service.category_id,
        "name": service.name,
        "description": service.description,
        "price": money(service.price),
        "duration": service.duration,
        "isCombo": service.is_combo,
        "isActive": service.is_active,
        "imageUrl": service.image_url,
        "createdAt": iso(service.created_at),
    }


def client_to_dict(client):
    return {
        "id": client.id,
        "barbershopId": client.barbershop_id,
        "name": client.name,
        "email": client.email,
        "phone": client.phone,
        "birthDate": iso(client.birth_date),
        "notes": client.notes,
        "preferences": client.preferences,
        "loyaltyPoints": client.loyalty_points,
        "totalVisits": client.total_visits,
        "totalSpent": money(client.total_spent),
        "lastVisit": iso(client.last_visit),
        "isActive": client.is_active,
        "createdAt": iso(client.created_at),
    }


def appointment_to_dict(appointment):
    return {
        "id": appointment.id,
        "barbershopId": appointment.barbershop_id,
        "clientId": appointment.client_id,
        "barberId": appointment.barber_id,
        "serviceId": appointment.service_id,
        "date": iso(appointment.date),
        "startTime": hhmm(appointment.start_time),
        "endTime": hhmm(appointment.end_time),
        "status": appointment.status,
        "price": money(appointment.price),
        "notes": appointment.notes,
        "clientName": appointment.client_name,
        "clientPhone": appointment.client_phone,
        "reminderSent": appointment.reminder_sent,
        "confirmedAt": iso(appointment.confirmed_at),
        "completedAt": iso(appointment.completed_at),
        "cancelledAt": iso(appointment.cancelled_at),
        "createdAt": iso(appointment.created_at),
    }


def product_to_dict(product):
    return {
        "id": product.id,
        "barbershopId": product.barbershop_id,
        "name": product.name,
        "description": product.description,
        "sku": product.sku,
        "price": money(product.price),
        "costPrice": money(product.cost_price),
        "stockQuantity": product.stock_quantity,
        "lowStockThreshold": product.low_stock_threshold,
        "lowStock": product.stock_quantity <= product.low_stock_threshold,
        "imageUrl": product.image_url,
        "isActive": product.is_active,
        "createdAt": iso(product.created_at),
    }


def transaction_to_dict(tx):
    return {
        "id": tx.id,
        "barbershopId": tx.barbershop_id,
        "appointmentId": tx.appointment_id,
        "barberId": tx.barber_id,
        "clientId": tx.client_id,
        "type": tx.type,
        "category": tx.category,
        "description": tx.description,
        "amount": money(tx.amount),
        "paymentMethod": tx.payment_method,
        "commissionAmount": money(tx.commission_amount),
        "date": iso(tx.date),
        "createdAt": iso(tx.created_at),
    }


def loyalty_plan_to_dict(plan):
    return {
        "id": plan.id,
        "barbershopId": plan.barbershop_id,
        "name": plan.name,
        "description": plan.description,
        "pointsPerCurrency": plan.points_per_currency,
        "rewardThreshold": plan.reward_threshold,
        "rewardValue": money(plan.reward_value),
        "rewardType": plan.reward_type,
        "isActive": plan.is_active,
        "createdAt": iso(plan.created_at),
    }


def package_to_dict(pkg):
    return {
        "id": pkg.id,
        "barbershopId": pkg.barbershop_id,
        "name": pkg.name,
        "description": pkg.description,
        "price": money(pkg.price),
        "credits": pkg.credits,
        "validityDays": pkg.validity_days,
        "includedServices": pkg.included_services or [],
        "isActive": pkg.is_active,
        "createdAt": iso(pkg.created_at),
    }


def coupon_to_dict(coupon):
    return {
        "id": coupon.id,
        "barbershopId": coupon.barbershop_id,
        "code": coupon.code,
        "description": coupon.description,
        "discountType": coupon.discount_type,
        "discountValue": money(coupon.discount_value),
        "minPurchase": money(coupon.min_purchase),
        "maxUses": coupon.max_uses,
        "usedCount": coupon.used_count,
        "validFrom": iso(coupon.valid_from),
        "validUntil": iso(coupon.valid_until),
        "isActive": coupon.is_active,
        "createdAt": iso(coupon.created_at),
    }


def review_to_dict(review):
    return {
        "id": review.id,
        "barbershopId": review.barbershop_id,
        "clientId": review.client_id,
        "clientName": review.client.name if review.client else None,
        "barberId": review.barber_id,
        "appointmentId": review.appointment_id,
        "rating": review.rating,
        "comment": review.comment,
        "reply": review.reply,
        "isPublic": review.is_public,
        "createdAt": iso(review.created_at),
    }
