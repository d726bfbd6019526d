from marketoracle.models.competition import Competition
from marketoracle.models.pick import Pick
from marketoracle.models.provider_statistics import ProviderStatistics
from marketoracle.models.resolution_lease import ResolutionLease
from marketoracle.models.weekly_performance import WeeklyPerformance

__all__ = ["Competition", "Pick", "ProviderStatistics", "WeeklyPerformance", "ResolutionLease"]
