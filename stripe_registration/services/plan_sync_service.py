"""Plan sync service — mirrors the Stripe plan catalog into stripe_plans.

Flow of sync_plans():
1. Drain every active plan from Stripe (all pages)
2. Join each plan's display name from its Stripe product
3. Diff remote plan IDs against local plan IDs
4. Create missing plans, delete stale ones (only if asked), rewrite the rest
5. Tell the user where to look at the result

After sync_plans(delete=True) the local plan IDs equal the remote active
plan IDs. With delete=False stale local plans are kept.
"""

import json
import logging
from collections import namedtuple

from stripe_registration.models.plan import StripePlan

logger = logging.getLogger(__name__)


RemotePlan = namedtuple("RemotePlan", ["id", "name", "livemode", "data"])
PlanSyncResult = namedtuple("PlanSyncResult", ["created", "updated", "deleted"])


def _snapshot(plan):
    """JSON-safe copy of a plan payload for the data column."""
    return json.loads(json.dumps(plan, default=str))


class PlanSynchronizer:

    def __init__(self, gateway, repository, notify, plan_list_url):
        self.gateway = gateway
        self.repository = repository
        self.notify = notify
        self.plan_list_url = plan_list_url

    # ── Loading ──

    def _product_name(self, product):
        """Name of a plan's product, expanded in place or looked up by ID."""
        if isinstance(product, dict) and product.get("name") is not None:
            return product["name"]
        product_id = product if isinstance(product, str) else product.get("id")
        return self.gateway.fetch_product(product_id).get("name")

    def _to_remote_plan(self, plan):
        return RemotePlan(
            id=plan["id"],
            name=self._product_name(plan.get("product")),
            livemode=bool(plan.get("livemode")),
            data=_snapshot(plan),
        )

    def load_remote_plan_multiple(self, **filters):
        """Fetch remote plans keyed by plan ID, with product names joined in.

        Products are expanded in the list call, so there is no extra
        request per plan unless Stripe returns a bare product ID.
        """
        plans = self.gateway.fetch_plans(expand=["data.product"], **filters)
        return {plan["id"]: self._to_remote_plan(plan) for plan in plans}

    def load_remote_plan_by_id(self, plan_id):
        """Return the RemotePlan for plan_id, or None if Stripe has no such plan."""
        plan = self.gateway.fetch_plan(plan_id, expand=["product"])
        if plan is None:
            return None
        return self._to_remote_plan(plan)

    def load_local_plan_multiple(self):
        return self.repository.load_multiple(StripePlan)

    # ── Sync ──

    def sync_plans(self, delete=False):
        """Reconcile local plans with the active Stripe catalog.

        Args:
            delete: also remove local plans that are no longer active
                    in Stripe. Left untouched otherwise.

        Returns a PlanSyncResult of plan ID lists.
        Raises stripe.StripeError on API failures.
        """
        remote_plans = self.load_remote_plan_multiple(active=True)
        local_plans_keyed = {
            plan.plan_id: plan for plan in self.load_local_plan_multiple()
        }

        plans_to_create = [pid for pid in remote_plans if pid not in local_plans_keyed]
        plans_to_update = [pid for pid in remote_plans if pid in local_plans_keyed]
        plans_to_delete = [pid for pid in local_plans_keyed if pid not in remote_plans]

        logger.info("Synchronizing Stripe plans.")

        # --- Create new plans ---
        for plan_id in plans_to_create:
            remote_plan = remote_plans[plan_id]
            self.repository.create(
                StripePlan,
                plan_id=remote_plan.id,
                name=remote_plan.name,
                livemode=remote_plan.livemode,
                data=remote_plan.data,
            )
            logger.info(f"Created {plan_id} plan.")

        # --- Delete stale plans ---
        deleted = []
        if delete and plans_to_delete:
            self.repository.delete(
                StripePlan, [local_plans_keyed[pid] for pid in plans_to_delete]
            )
            deleted = plans_to_delete
            logger.info(f"Deleted plans {', '.join(plans_to_delete)}.")

        # --- Update existing plans (always written, no dirty check) ---
        for plan_id in plans_to_update:
            plan = local_plans_keyed[plan_id]
            remote_plan = remote_plans[plan_id]
            plan.name = remote_plan.name
            plan.livemode = remote_plan.livemode
            plan.data = remote_plan.data
            self.repository.save(plan)
            logger.info(f"Updated {plan_id} plan.")

        self.notify(
            "Stripe plans were synchronized. Visit the Stripe plan list "
            f"({self.plan_list_url}) to see synchronized plans.",
            "status",
        )

        return PlanSyncResult(
            created=plans_to_create, updated=plans_to_update, deleted=deleted
        )
