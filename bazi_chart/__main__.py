from bazi_chart.run import main

main()
