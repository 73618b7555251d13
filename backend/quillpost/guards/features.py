"""
Quillpost Backend — Feature Flag Gate
=======================================

A route tagged with a feature flag is reachable only while that flag is
globally enabled and not switched off for the request's tenant.
"""

import logging
from typing import Optional

from quillpost.context import RequestContext
from quillpost.exceptions import FeatureDisabledError
from quillpost.policy import FEATURE_POLICY, FeaturePolicy

logger = logging.getLogger(__name__)


def check_feature(
    context: RequestContext,
    feature: Optional[str],
    features: FeaturePolicy = FEATURE_POLICY,
) -> None:
    if not feature:
        return

    tenant_id = context.tenant_id
    logger.debug(
        "[%s] Checking feature flag %s for tenant %s",
        context.correlation_id,
        feature,
        tenant_id,
    )
    if not features.is_enabled(feature, tenant_id):
        raise FeatureDisabledError(feature, context.correlation_id)
