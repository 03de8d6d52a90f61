from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.core.paginator import Paginator
from django.shortcuts import get_object_or_404, render

from works.models import Work, WorkLink


@login_required
def work_links(request, work_id):
    """
    Referral statistics for one work.
    Only the work's own creators may look at them.
    """
    work = get_object_or_404(Work, id=work_id)

    if not work.is_owned_by(request.user):
        raise PermissionDenied("You can only view statistics for your own works.")

    qs = (
        WorkLink.objects
        .filter(work=work)
        .order_by("created_at", "id")
    )

    paginator = Paginator(qs, getattr(settings, "WORK_LINKS_PER_PAGE", 30))
    page_number = request.GET.get("page")
    page_obj = paginator.get_page(page_number)

    return render(
        request,
        "works/work_links.html",
        {
            "work": work,
            "page_obj": page_obj,
        }
    )
